"""
Poll-sync controller: keeps a view-state mirror of the backend up to date
"""
import itertools
import logging
import threading
from dataclasses import replace

from smartpump.config import POLL_INTERVAL, LOW_WATER_FRACTION, MAX_CONSECUTIVE_ERRORS
from smartpump.alerts import LowWaterLatch
from smartpump.state import ViewState, reduce_view_state

log = logging.getLogger('smartpump.poll')

def spawn_thread(fn):
    """Run fn on its own daemon thread"""
    thread = threading.Thread(target=fn, daemon=True)
    thread.start()
    return thread

class RepeatingTimer(threading.Thread):
    """Thread that calls a function every interval seconds until stopped"""

    def __init__(self, interval, function):
        super().__init__(daemon=True)
        self.interval = interval
        self.function = function
        self._stopped = threading.Event()

    def stop(self):
        """Stop the timer; a tick already running is not interrupted"""
        self._stopped.set()

    def run(self):
        while not self._stopped.wait(self.interval):
            self.function()

class PollSyncController:
    """
    Best-effort mirror of backend tank and system state.

    Each fetch cycle requests the tank list and the system status
    independently. Failures are logged and otherwise ignored so the last
    good view-state stays on screen. Cycles are not serialized: a slow
    cycle can overlap the next tick, and responses older than what has
    already been applied are dropped by the reducer.
    """

    def __init__(self, client, interval=POLL_INTERVAL, threshold=LOW_WATER_FRACTION,
                 spawn=spawn_thread, max_consecutive_errors=MAX_CONSECUTIVE_ERRORS):
        self.client = client
        self.interval = interval
        self.spawn = spawn
        self.max_consecutive_errors = max_consecutive_errors
        self.latch = LowWaterLatch(threshold)

        self._state = ViewState()
        self._lock = threading.Lock()
        self._seq = itertools.count(1)
        self._timer = None
        self._stopped = False
        self._listeners = []
        self._low_water_handlers = []

        # Consecutive failures per endpoint
        self.errors = {'tanks': 0, 'system': 0}

    @property
    def state(self):
        return self._state

    @property
    def connected(self):
        """True while the most recent tank and system requests both succeeded"""
        return self.errors['tanks'] == 0 and self.errors['system'] == 0

    def subscribe(self, listener):
        """Call listener(view_state) after every fetch cycle. Returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._remove(self._listeners, listener)

    def on_low_water(self, handler):
        """Call handler(tank) whenever the low-water latch trips. Returns an unsubscribe function."""
        self._low_water_handlers.append(handler)
        return lambda: self._remove(self._low_water_handlers, handler)

    @staticmethod
    def _remove(callbacks, callback):
        if callback in callbacks:
            callbacks.remove(callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Fetch immediately, then every interval seconds until stop()"""
        if self._timer is not None:
            return
        self._stopped = False
        self.spawn(self.fetch_cycle)
        self._timer = RepeatingTimer(self.interval, lambda: self.spawn(self.fetch_cycle))
        self._timer.start()
        log.info("Polling %s every %ss", getattr(self.client, 'base_url', 'backend'), self.interval)

    def stop(self):
        """Cancel the schedule; responses still in flight are discarded"""
        self._stopped = True
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        log.info("Polling stopped")

    # ------------------------------------------------------------------
    # Fetch cycle
    # ------------------------------------------------------------------

    def fetch_cycle(self):
        """
        One poll: tanks, then system status, then the low-water check.
        Returns the view-state after the cycle.
        """
        seq = next(self._seq)

        self._apply('tanks', self.client.get_tanks(), seq)
        self._apply('system', self.client.get_system(), seq)

        if self._stopped:
            return self._state

        self._evaluate_low_water()

        state = self._state
        log.debug("Cycle %d: %d tanks, system=%s", seq, len(state.tanks), state.system)
        for listener in list(self._listeners):
            listener(state)
        return state

    def _apply(self, kind, result, seq):
        if result['status'] == 'success':
            if self.errors[kind] > 0:
                log.info("%s fetch recovered after %d errors", kind.capitalize(), self.errors[kind])
            self.errors[kind] = 0
        else:
            self.errors[kind] += 1
            log.warning("%s fetch error %d: %s", kind.capitalize(), self.errors[kind],
                        result.get('error_message', 'Unknown error'))
            if self.errors[kind] == self.max_consecutive_errors:
                log.warning("%s fetch has failed %d times in a row, display is stale",
                            kind.capitalize(), self.errors[kind])

        if self._stopped:
            return
        with self._lock:
            self._state = reduce_view_state(self._state, kind, result, seq)

    def _evaluate_low_water(self):
        # Latch and pending id change together so surfaces never see one without the other
        with self._lock:
            tank = self.latch.evaluate(self._state)
            if tank is None:
                return
            self._state = replace(self._state, low_water_tank_id=tank.id)

        log.warning("Low water in tank %d: %.2f of %.2f", tank.id, tank.water_level, tank.capacity)
        for handler in list(self._low_water_handlers):
            handler(tank)

    def acknowledge_low_water(self):
        """
        The Refill action of the low-water prompt: command the tank that
        tripped the latch into refill and re-arm the latch.
        """
        with self._lock:
            tank_id = self.latch.acknowledge()
            if tank_id is None:
                return False
            self._state = replace(self._state, low_water_tank_id=None)
        log.info("Low water acknowledged, refilling tank %d", tank_id)
        self.send_command(tank_id, 'refill')
        return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _after_command(self, result, description):
        """Refresh out of band on success, log on failure"""
        if result['status'] == 'success':
            self.spawn(self.fetch_cycle)
            return True
        log.warning("Error %s: %s", description, result.get('error_message', 'Unknown error'))
        return False

    def send_command(self, tank_id, action):
        """Set a tank to 'active', 'refill' or 'idle'"""
        result = self.client.set_tank_state(tank_id, action)
        return self._after_command(result, f"setting tank {tank_id} to {action}")

    def toggle_manual(self):
        return self._after_command(self.client.toggle_manual(), "toggling manual override")

    def toggle_cycle(self):
        """Reactivate a deactivated system, otherwise deactivate it"""
        if self._state.deactivated:
            result = self.client.activate_cycle()
        else:
            result = self.client.deactivate_cycle()
        return self._after_command(result, "toggling cycle")

    def initialize(self, capacities):
        return self._after_command(self.client.initialize(capacities), "during initialization")

    # ------------------------------------------------------------------
    # On-demand reads
    # ------------------------------------------------------------------

    def fetch_notifications(self):
        """Backend notification strings, or None if they could not be fetched"""
        result = self.client.get_alerts()
        if result['status'] != 'success':
            log.warning("Error fetching notifications: %s", result.get('error_message'))
            return None
        return result['alerts']

    def clear_notifications(self):
        result = self.client.clear_alerts()
        if result['status'] != 'success':
            log.warning("Error clearing notifications: %s", result.get('error_message'))
            return False
        return True

    def fetch_consumption(self, period):
        """Consumption points for the chart, or None on failure"""
        result = self.client.get_consumption(period)
        if result['status'] != 'success':
            log.warning("Error fetching consumption data: %s", result.get('error_message'))
            return None
        return result['consumption']
