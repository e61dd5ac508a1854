#!/usr/bin/env python3
"""
Web dashboard for the smart pump system
Serves the operator view over HTTP with basic authentication
"""
import argparse
import hmac
import logging
import os
import sys
from functools import wraps

from flask import Flask, request, Response, jsonify, render_template_string

from smartpump import __version__
from smartpump.config import (
    API_URL, POLL_INTERVAL, REQUEST_TIMEOUT, STALE_AFTER, LOG_FORMAT,
    WEB_HOST, WEB_PORT, WEB_USERNAME, WEB_PASSWORD,
    TANK_ACTIONS, CONSUMPTION_PERIODS, DEFAULT_CONSUMPTION_PERIOD, load_config_file
)
from smartpump.api import BackendClient
from smartpump.poll import PollSyncController
from smartpump.chart import render_consumption_chart
from smartpump.initialize import initialize_simulation

log = logging.getLogger('smartpump.web')

app = Flask(__name__)
app.config.setdefault('CONTROLLER', None)
app.config.setdefault('USERNAME', WEB_USERNAME)
app.config.setdefault('PASSWORD', WEB_PASSWORD)
app.config.setdefault('STALE_AFTER', STALE_AFTER)
app.config.setdefault('AUTH_REALM', 'Smart Pump')

def get_controller():
    controller = app.config['CONTROLLER']
    if controller is None:
        raise RuntimeError("No PollSyncController configured for the dashboard")
    return controller

def operator_allowed(auth):
    """Compare basic-auth credentials against the configured operator account"""
    if auth is None or auth.username is None or auth.password is None:
        return False
    user_ok = hmac.compare_digest(auth.username.encode(), app.config['USERNAME'].encode())
    pass_ok = hmac.compare_digest(auth.password.encode(), app.config['PASSWORD'].encode())
    return user_ok and pass_ok

def operator_only(view):
    """Reject the request with a basic-auth challenge unless the operator is logged in"""
    @wraps(view)
    def guarded(*args, **kwargs):
        if operator_allowed(request.authorization):
            return view(*args, **kwargs)
        log.info("Rejected %s %s from %s", request.method, request.path, request.remote_addr)
        return Response(
            'Operator login required',
            401,
            {'WWW-Authenticate': f'Basic realm="{app.config["AUTH_REALM"]}"'}
        )
    return guarded

def command_response(ok):
    """Commands report success only; failures are already logged by the controller"""
    return jsonify({'ok': ok}), (200 if ok else 502)

@app.route('/api/state')
@operator_only
def state():
    """Current view-state plus connectivity"""
    controller = get_controller()
    view = controller.state
    data = view.to_dict()
    data['connected'] = controller.connected
    data['stale'] = view.is_stale(max_age=app.config['STALE_AFTER'])
    return jsonify(data)

@app.route('/api/tanks/<int:tank_id>/<action>', methods=['POST'])
@operator_only
def set_tank_state(tank_id, action):
    if action not in TANK_ACTIONS:
        return jsonify({'error': f"Unknown action {action!r}"}), 400
    return command_response(get_controller().send_command(tank_id, action))

@app.route('/api/system/toggle_manual', methods=['POST'])
@operator_only
def toggle_manual():
    return command_response(get_controller().toggle_manual())

@app.route('/api/system/toggle_cycle', methods=['POST'])
@operator_only
def toggle_cycle():
    return command_response(get_controller().toggle_cycle())

@app.route('/api/alert/refill', methods=['POST'])
@operator_only
def refill_alert():
    """Refill action of the low-water prompt"""
    if not get_controller().acknowledge_low_water():
        return jsonify({'error': 'No low water alert pending'}), 409
    return jsonify({'ok': True})

@app.route('/api/notifications')
@operator_only
def notifications():
    """Fresh fetch on every open, nothing is cached"""
    alerts = get_controller().fetch_notifications()
    if alerts is None:
        return jsonify({'error': 'Could not fetch notifications'}), 502
    return jsonify({'alerts': alerts})

@app.route('/api/notifications/clear', methods=['POST'])
@operator_only
def clear_notifications():
    return command_response(get_controller().clear_notifications())

@app.route('/api/initialize', methods=['POST'])
@operator_only
def initialize():
    """Body: {"capacities": [...], "tanks": N}; tanks is optional and fixes how many capacities are expected"""
    body = request.get_json(silent=True) or {}
    capacities = body.get('capacities')
    if not isinstance(capacities, list):
        return jsonify({'error': 'capacities must be a list'}), 400
    try:
        ok = initialize_simulation(get_controller(), capacities, count=body.get('tanks'))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return command_response(ok)

@app.route('/api/chart.png')
@operator_only
def chart_image():
    """Consumption bar chart as PNG"""
    period = request.args.get('period', DEFAULT_CONSUMPTION_PERIOD)
    if period not in CONSUMPTION_PERIODS:
        return Response(f'Unknown period: {period}', status=400)

    points = get_controller().fetch_consumption(period)
    if points is None:
        return Response('Error fetching consumption data', status=502)

    png = render_consumption_chart(points, period)
    if png is None:
        return Response('No consumption data available', status=404)
    return Response(png, mimetype='image/png')

INDEX_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <title>Smart Pump System</title>
    <style>
        body { font-family: sans-serif; margin: 0; background: #fff; }
        header { background: #0197F6; color: #fff; padding: 12px 16px; font-weight: bold; }
        .card { border-radius: 16px; box-shadow: 0 2px 6px #0003; margin: 8px 16px; padding: 16px; }
        .title { color: #0197F6; font-weight: bold; font-size: 18px; }
        .stale { color: #c00; }
        #modal { display: none; position: fixed; inset: 0; background: #0008; }
        #modal .card { background: #fff; max-width: 360px; margin: 20vh auto; }
    </style>
</head>
<body>
    <header>
        Smart Pump System v{{ version }}
        <button onclick="showNotifications()">Notifications</button>
        <select id="period">
            {% for period in periods %}<option value="{{ period }}">{{ period }}</option>{% endfor %}
        </select>
        <button onclick="window.open('/api/chart.png?period=' + document.getElementById('period').value)">Chart</button>
    </header>
    <div id="system" class="card"></div>
    <div id="stats" class="card"></div>
    <div id="tanks"></div>
    <div id="modal"><div class="card">
        <div class="title">Low Water Alert</div>
        <p>Water below threshold. Please refill the tank.</p>
        <button onclick="post('/api/alert/refill')">Refill</button>
    </div></div>
<script>
function post(url) { return fetch(url, {method: 'POST'}).then(refresh); }
function showNotifications() {
    fetch('/api/notifications').then(r => r.json()).then(d => {
        const text = (d.alerts && d.alerts.length) ? d.alerts.join('\\n') : 'No notifications.';
        if (confirm(text + '\\n\\nOK to clear, Cancel to close')) { post('/api/notifications/clear'); }
    });
}
function refresh() {
    fetch('/api/state').then(r => r.json()).then(s => {
        const sys = s.system;
        document.getElementById('system').innerHTML = sys ?
            `<label><input type="checkbox" ${sys.manual_override ? 'checked' : ''}
              onchange="post('/api/system/toggle_manual')"> Manual Override</label>
             <button onclick="post('/api/system/toggle_cycle')">
              ${sys.deactivated ? 'Reactivate System' : 'Deactivate System'}</button>` : '';
        const st = s.statistics;
        document.getElementById('stats').innerHTML = s.tanks.length ?
            `<div class="title">System Statistics ${s.stale ? '<span class="stale">(stale)</span>' : ''}</div>
             Total Capacity: ${st.total_capacity.toFixed(2)} L<br>
             Total Water: ${st.total_water.toFixed(2)} L<br>
             Overall Fullness: ${st.overall_percent.toFixed(2)}%<br>
             Active: ${st.active} Refill: ${st.refill} Idle: ${st.idle}` : '';
        document.getElementById('tanks').innerHTML = s.tanks.map(t =>
            `<div class="card"><div class="title">Tank ${t.id}</div>
             Capacity: ${t.capacity}<br>
             Water Level: ${t.water_level.toFixed(2)} (Sensor: ${t.sensor.toFixed(2)})<br>
             State: ${t.state}<br><small>Last Event: ${t.last_event}</small><br>
             <progress value="${t.fraction}" max="1"></progress>
             ${sys && sys.manual_override ? ['active', 'refill', 'idle'].map(a =>
                `<button onclick="post('/api/tanks/${t.id}/${a}')">${a}</button>`).join(' ') : ''}
             </div>`).join('');
        document.getElementById('modal').style.display =
            s.low_water_tank_id === null ? 'none' : 'block';
    });
}
refresh();
setInterval(refresh, {{ refresh_ms }});
</script>
</body>
</html>
"""

@app.route('/')
@operator_only
def index():
    """Main status page"""
    return render_template_string(
        INDEX_TEMPLATE,
        version=__version__,
        periods=CONSUMPTION_PERIODS,
        refresh_ms=int(app.config.get('REFRESH_SECONDS', POLL_INTERVAL) * 1000),
    )

def main():
    """Main entry point"""
    file_config = load_config_file()

    parser = argparse.ArgumentParser(
        prog='smartpump.web',
        description='Web dashboard for the smart pump system'
    )
    parser.add_argument('--host', default=file_config.get('WEB_HOST', WEB_HOST),
                       help=f'Host to bind to (default: {WEB_HOST})')
    parser.add_argument('--port', type=int, default=file_config.get('WEB_PORT', WEB_PORT),
                       help=f'Port to listen on (default: {WEB_PORT})')
    parser.add_argument('--api-url', default=file_config.get('API_URL', API_URL),
                       help=f'Backend API base URL (default: {API_URL})')
    parser.add_argument('--interval', type=float,
                       default=file_config.get('POLL_INTERVAL', POLL_INTERVAL),
                       help='Seconds between fetch cycles (default: 1)')
    parser.add_argument('--cert', help='SSL certificate file')
    parser.add_argument('--key', help='SSL key file')
    parser.add_argument('--debug', action='store_true',
                       help='Enable debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    ssl_context = None
    if args.cert or args.key:
        if args.cert and args.key and os.path.exists(args.cert) and os.path.exists(args.key):
            ssl_context = (args.cert, args.key)
        else:
            print(f"⚠️  SSL certificate or key not found ({args.cert}, {args.key})")
            return

    client = BackendClient(args.api_url, timeout=file_config.get('REQUEST_TIMEOUT', REQUEST_TIMEOUT))
    controller = PollSyncController(client, interval=args.interval)
    app.config['CONTROLLER'] = controller
    app.config['REFRESH_SECONDS'] = args.interval
    app.config['STALE_AFTER'] = file_config.get('STALE_AFTER', STALE_AFTER)

    scheme = 'https' if ssl_context else 'http'
    print(f"Starting server on {scheme}://{args.host}:{args.port}/")
    print(f"Username: {app.config['USERNAME']}")
    print("\nSet credentials with environment variables:")
    print("  export SMARTPUMP_USER=yourusername")
    print("  export SMARTPUMP_PASS=yourpassword")

    controller.start()
    try:
        # The reloader would start a second controller in the child process
        app.run(host=args.host, port=args.port, ssl_context=ssl_context,
                debug=args.debug, use_reloader=False)
    finally:
        controller.stop()

if __name__ == "__main__":
    main()
