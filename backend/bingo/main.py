import os

from flask import Blueprint, current_app, jsonify, send_from_directory, abort

from bingo import get_registry

main = Blueprint('main', __name__)


@main.route('/')
def index():
    static_dir = current_app.config['STATIC_DIR']
    if os.path.isfile(os.path.join(static_dir, 'index.html')):
        return send_from_directory(static_dir, 'index.html')
    return jsonify({'message': 'Welcome to the bingo server!'})


@main.route('/healthz')
def healthz():
    return jsonify({'status': 'ok', 'rooms': len(get_registry(current_app).rooms)})


@main.route('/<path:filename>')
def static_files(filename):
    static_dir = current_app.config['STATIC_DIR']
    if not os.path.isdir(static_dir):
        abort(404)
    return send_from_directory(static_dir, filename)
