from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the guessroom game server!'})


@main.route('/health')
def health():
    registry = current_app.extensions['guessroom']['registry']
    return jsonify({'status': 'ok', 'games': len(registry)})
