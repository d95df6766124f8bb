from flask import Blueprint, jsonify
from typerace import registry

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the typerace room server!'})

@main.route('/health')
def health():
    return jsonify({'status': 'healthy', 'rooms': len(registry)})

@main.route('/api/rooms/<string:room_id>')
def room_state(room_id):
    room = registry.get(room_id)
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(room.to_dict())
