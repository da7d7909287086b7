import os

_DEFAULT_DB_PATH = os.environ.get('DB_PATH') or os.path.join(os.path.dirname(__file__), 'data', 'wingspan.db')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or f'sqlite:///{_DEFAULT_DB_PATH}'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Roster size for freshly created scoring sessions
    DEFAULT_NUM_PLAYERS = int(os.environ.get('DEFAULT_NUM_PLAYERS', '4'))
    # Default page size for game history listing
    HISTORY_PAGE_LIMIT = int(os.environ.get('HISTORY_PAGE_LIMIT', '50'))
    # Comma separated list of front-end origins allowed by CORS and Socket.IO
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080,http://127.0.0.1:8080',
        ).split(',') if o.strip()
    ]
