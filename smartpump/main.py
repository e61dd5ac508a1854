"""
Main entry point for the console operator dashboard
"""
import argparse
import logging
import queue
import sys
import threading

from smartpump import __version__
from smartpump.config import (
    API_URL, POLL_INTERVAL, REQUEST_TIMEOUT, STALE_AFTER, LOG_FORMAT,
    TANK_ACTIONS, CONSUMPTION_PERIODS, load_config_file
)
from smartpump.api import BackendClient
from smartpump.poll import PollSyncController
from smartpump.check import format_view_state, format_notifications
from smartpump.chart import render_consumption_chart, chart_summary
from smartpump.initialize import initialize_simulation

log = logging.getLogger('smartpump')

class ConsoleDashboard:
    """Redraws the view-state on every cycle and owns the low-water prompt"""

    def __init__(self, controller, stale_after=STALE_AFTER, clear_screen=True):
        self.controller = controller
        self.stale_after = stale_after
        self.clear_screen = clear_screen
        self.alerts = queue.Queue()
        self.prompt_open = threading.Event()

    def render(self, state):
        # Freeze the display while the operator answers the prompt
        if self.prompt_open.is_set():
            return
        if self.clear_screen:
            print("\033[2J\033[H", end="")
        print(format_view_state(state, stale_after=self.stale_after))
        if not self.controller.connected:
            print("⚠️  Backend not responding, showing last known data")

    def queue_alert(self, tank):
        self.alerts.put(tank)

    def prompt_refill(self, tank):
        """Blocking prompt whose only way out is the Refill action"""
        self.prompt_open.set()
        try:
            print("\n" + "!" * 60)
            print("LOW WATER ALERT")
            print(f"Water below threshold in tank {tank.id} "
                  f"({tank.water_level:.2f} of {tank.capacity:.2f}). Please refill the tank.")
            print("!" * 60)
            input("Press Enter to Refill... ")
        finally:
            self.prompt_open.clear()
        self.controller.acknowledge_low_water()

    def run(self):
        unsubscribe = self.controller.subscribe(self.render)
        stop_alerts = self.controller.on_low_water(self.queue_alert)
        self.controller.start()
        try:
            while True:
                try:
                    tank = self.alerts.get(timeout=0.5)
                except queue.Empty:
                    continue
                self.prompt_refill(tank)
        except (KeyboardInterrupt, EOFError):
            print("\n✓ Dashboard stopped")
        finally:
            self.controller.stop()
            unsubscribe()
            stop_alerts()

def main():
    """Main entry point"""

    file_config = load_config_file()

    parser = argparse.ArgumentParser(
        prog='smartpump',
        description='Console operator dashboard for the smart pump system'
    )

    parser.add_argument('--api-url',
                       default=file_config.get('API_URL', API_URL),
                       help=f'Backend API base URL (default: {API_URL})')
    parser.add_argument('--interval', type=float,
                       default=file_config.get('POLL_INTERVAL', POLL_INTERVAL),
                       help='Seconds between fetch cycles (default: 1)')
    parser.add_argument('--timeout', type=float,
                       default=file_config.get('REQUEST_TIMEOUT', REQUEST_TIMEOUT),
                       help='Request timeout seconds (default: 10)')
    parser.add_argument('--debug', action='store_true',
                       help='Enable debug logging')
    parser.add_argument('--notifications', action='store_true',
                       help='Print backend notifications and exit')
    parser.add_argument('--clear', action='store_true',
                       help='With --notifications, clear them after printing')
    parser.add_argument('--init', nargs='+', metavar='CAPACITY',
                       help='Initialize the simulation with these tank capacities and exit')
    parser.add_argument('--tanks', metavar='N',
                       help='With --init, the number of tanks; exactly N capacities are then required')
    parser.add_argument('--set-state', nargs=2, metavar=('TANK_ID', 'ACTION'),
                       help=f'Set a tank state ({", ".join(TANK_ACTIONS)}) and exit')
    parser.add_argument('--toggle-manual', action='store_true',
                       help='Toggle manual override and exit')
    parser.add_argument('--toggle-cycle', action='store_true',
                       help='Deactivate or reactivate the system and exit')
    parser.add_argument('--chart', nargs=2, metavar=('PERIOD', 'OUTPUT'),
                       help=f'Write a consumption chart PNG ({"/".join(CONSUMPTION_PERIODS)}) and exit')
    parser.add_argument('--version', action='version',
                       version=f'%(prog)s {__version__}')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    client = BackendClient(args.api_url, timeout=args.timeout)
    # One-shot commands refresh synchronously instead of on a background thread
    controller = PollSyncController(client, interval=args.interval, spawn=lambda fn: fn())

    if args.notifications:
        print(format_notifications(controller.fetch_notifications()))
        if args.clear:
            sys.exit(0 if controller.clear_notifications() else 1)
        return

    if args.init:
        try:
            ok = initialize_simulation(controller, args.init, count=args.tanks)
        except ValueError as e:
            parser.error(str(e))
        sys.exit(0 if ok else 1)

    if args.set_state:
        tank_id, action = args.set_state
        if not tank_id.isdigit():
            parser.error(f"TANK_ID must be a tank number, got {tank_id!r}")
        if action not in TANK_ACTIONS:
            parser.error(f"ACTION must be one of {', '.join(TANK_ACTIONS)}")
        sys.exit(0 if controller.send_command(int(tank_id), action) else 1)

    if args.toggle_manual:
        sys.exit(0 if controller.toggle_manual() else 1)

    if args.toggle_cycle:
        # The endpoint depends on the current flag, so fetch it first
        controller.fetch_cycle()
        sys.exit(0 if controller.toggle_cycle() else 1)

    if args.chart:
        period, output = args.chart
        if period not in CONSUMPTION_PERIODS:
            parser.error(f"PERIOD must be one of {', '.join(CONSUMPTION_PERIODS)}")
        points = controller.fetch_consumption(period)
        if points is None:
            sys.exit(1)
        png = render_consumption_chart(points, period)
        if png is None:
            print("No consumption data available")
            return
        with open(output, 'wb') as f:
            f.write(png)
        summary = chart_summary(points)
        print(f"Wrote {output}: {summary['count']} points, "
              f"total {summary['total']:.2f}, peak {summary['peak']:.2f}")
        return

    log.info("Smart Pump console v%s, backend %s", __version__, args.api_url)
    dashboard = ConsoleDashboard(
        PollSyncController(client, interval=args.interval),
        stale_after=file_config.get('STALE_AFTER', STALE_AFTER),
        clear_screen=not args.debug,
    )
    dashboard.run()

if __name__ == "__main__":
    main()
