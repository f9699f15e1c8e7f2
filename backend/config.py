import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of origins allowed to open a socket
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', 'http://localhost:3000').split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '5000'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # strftime pattern for the server-assigned chat timestamp
    CHAT_TIMESTAMP_FORMAT = os.environ.get('CHAT_TIMESTAMP_FORMAT', '%I:%M:%S %p')
    # Dev server switches; the Werkzeug server is only meant for local runs
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    ALLOW_UNSAFE_WERKZEUG = os.environ.get('ALLOW_UNSAFE_WERKZEUG', '0') == '1'
