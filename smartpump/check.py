#!/usr/bin/env python3
"""
System status checker - fetches the backend once and prints tanks and statistics
"""
import argparse
import sys
from datetime import datetime

from smartpump.config import API_URL, REQUEST_TIMEOUT, STALE_AFTER, load_config_file
from smartpump.api import BackendClient
from smartpump.poll import PollSyncController

def format_system(system):
    """Format manual override and cycle flags"""
    if system is None:
        return "System:          UNKNOWN (no status received yet)"
    override = "ON" if system.manual_override else "OFF"
    cycle = "DEACTIVATED" if system.deactivated else "RUNNING"
    return f"Manual Override: {override}\nCycle:           {cycle}"

def format_statistics(stats):
    """Format the aggregate card"""
    return "\n".join([
        f"Total Capacity:  {stats.total_capacity:.2f} L",
        f"Total Water:     {stats.total_water:.2f} L",
        f"Overall Fullness: {stats.overall_percent:.2f}%",
        f"Active: {stats.active_count}   Refill: {stats.refill_count}   Idle: {stats.idle_count}",
    ])

def format_level_bar(fraction, width=30):
    fraction = min(max(fraction, 0.0), 1.0)
    filled = int(round(fraction * width))
    return "[" + "#" * filled + "-" * (width - filled) + "]"

def format_tank(tank):
    """Format one tank card"""
    return "\n".join([
        f"Tank {tank.id}",
        f"  Capacity:    {tank.capacity}",
        f"  Water Level: {tank.water_level:.2f} (Sensor: {tank.sensor:.2f})",
        f"  State:       {tank.state}",
        f"  Last Event:  {tank.last_event}",
        f"  {format_level_bar(tank.fraction)} {tank.fraction * 100:.1f}%",
    ])

def format_view_state(state, now=None, stale_after=STALE_AFTER):
    """Full dashboard as text"""
    now = now or datetime.now()
    lines = ["=" * 60]
    if state.last_updated is None:
        lines.append("SMART PUMP SYSTEM - waiting for first update")
    else:
        updated = state.last_updated.strftime('%H:%M:%S')
        stale = "  [STALE]" if state.is_stale(now, stale_after) else ""
        lines.append(f"SMART PUMP SYSTEM - updated {updated}{stale}")
    lines.append("=" * 60)
    lines.append(format_system(state.system))

    if state.tanks:
        lines.append("-" * 60)
        lines.append(format_statistics(state.statistics))
        for tank in state.tanks:
            lines.append("-" * 60)
            lines.append(format_tank(tank))
    else:
        lines.append("-" * 60)
        lines.append("No tanks reported")

    if state.low_water_tank_id is not None:
        lines.append("-" * 60)
        lines.append(f"LOW WATER ALERT - tank {state.low_water_tank_id} needs a refill")
    lines.append("=" * 60)
    return "\n".join(lines)

def format_notifications(alerts):
    if alerts is None:
        return "Could not fetch notifications"
    if not alerts:
        return "No notifications."
    return "\n".join(f"  ! {alert}" for alert in alerts)

def main():
    """Fetch once and print"""
    file_config = load_config_file()

    parser = argparse.ArgumentParser(
        prog='smartpump.check',
        description='Print the current state of the pump-control backend'
    )
    parser.add_argument('--api-url',
                       default=file_config.get('API_URL', API_URL),
                       help=f'Backend API base URL (default: {API_URL})')
    parser.add_argument('--notifications', action='store_true',
                       help='Also print backend notifications')
    args = parser.parse_args()

    client = BackendClient(args.api_url, timeout=file_config.get('REQUEST_TIMEOUT', REQUEST_TIMEOUT))
    controller = PollSyncController(client, spawn=lambda fn: None)
    state = controller.fetch_cycle()

    print(format_view_state(state))
    if args.notifications:
        print("\nNotifications:")
        print(format_notifications(controller.fetch_notifications()))

    if not controller.connected:
        print("\n✗ Backend did not answer every request", file=sys.stderr)
        sys.exit(1)

if __name__ == "__main__":
    main()
