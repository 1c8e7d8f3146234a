import os


def _split_origins(raw):
    if not raw or raw.strip() == '*':
        return '*'
    return [origin.strip() for origin in raw.split(',') if origin.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    CORS_ALLOWED_ORIGINS = _split_origins(os.environ.get('CORS_ALLOWED_ORIGINS', '*'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    # Directory (relative to the backend root) holding the browser client
    STATIC_FOLDER = os.environ.get('STATIC_FOLDER', 'public')
    # Rooms with no host and no online players are evicted after this long (seconds). 0 disables.
    ROOM_IDLE_EXPIRY_SEC = int(os.environ.get('ROOM_IDLE_EXPIRY_SEC', str(6 * 60 * 60)))
    ROOM_SWEEP_INTERVAL_SEC = int(os.environ.get('ROOM_SWEEP_INTERVAL_SEC', '300'))
    # Optional: tell players when the host drops out
    NOTIFY_HOST_LEFT = os.environ.get('NOTIFY_HOST_LEFT', 'false').lower() in ('1', 'true', 'yes')
