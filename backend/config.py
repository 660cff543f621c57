import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///mathgame.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Comma-separated list of origins allowed to call the API
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
    ).split(',') if o.strip()]
    # Scoring
    POINTS_PER_CORRECT = int(os.environ.get('POINTS_PER_CORRECT', '10'))
    # Reject games whose score is not correct * POINTS_PER_CORRECT. Off keeps the lenient rule.
    STRICT_SCORE_CHECK = os.environ.get('STRICT_SCORE_CHECK', '0').lower() in ('1', 'true', 'yes')
    # Query defaults
    LEADERBOARD_DEFAULT_LIMIT = int(os.environ.get('LEADERBOARD_DEFAULT_LIMIT', '10'))
    LEADERBOARD_MAX_LIMIT = int(os.environ.get('LEADERBOARD_MAX_LIMIT', '100'))
    RECENT_GAMES_LIMIT = int(os.environ.get('RECENT_GAMES_LIMIT', '10'))
    TRENDS_DEFAULT_DAYS = int(os.environ.get('TRENDS_DEFAULT_DAYS', '7'))
