from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({
        'message': 'Watch party room coordinator',
        'endpoints': {
            'socketio': current_app.config.get('SOCKETIO_NAMESPACE', '/'),
            'health': '/health',
        },
    })

@main.route('/health')
def health():
    # Read-only snapshot; the registry lock is held only while counting
    active_rooms, total_users = current_app.extensions['room_registry'].stats()
    return jsonify({
        'status': 'OK',
        'activeRooms': active_rooms,
        'totalUsers': total_users,
    })
