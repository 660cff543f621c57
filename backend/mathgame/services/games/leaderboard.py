from sqlalchemy import func

from mathgame import db
from mathgame.models import User, GameSession
from .timeframes import apply_window


def _avg(value) -> float:
    return round(float(value or 0), 2)


def get_leaderboard(timeframe: str = 'all', limit: int = 10, now=None) -> list:
    """Rank users by their sessions inside the selected window.

    Sessions are filtered by ``timeframe`` before aggregation, so only users
    with at least one qualifying session appear. Ordered by best score, then
    average score, then user id.
    """
    best_score = func.max(GameSession.score)
    avg_score = func.avg(GameSession.score)
    query = (
        db.session.query(
            User.id,
            User.username,
            best_score.label('best_score'),
            avg_score.label('avg_score'),
            func.sum(GameSession.correct).label('total_correct'),
            func.sum(GameSession.wrong).label('total_wrong'),
            func.count(GameSession.id).label('games_played'),
            func.max(GameSession.played_at).label('last_played'),
        )
        .join(GameSession, GameSession.user_id == User.id)
    )
    query = apply_window(query, GameSession.played_at, timeframe, now)
    rows = (
        query.group_by(User.id, User.username)
        .order_by(best_score.desc(), avg_score.desc(), User.id.asc())
        .limit(max(1, int(limit)))
        .all()
    )
    return [
        {
            'user_id': r.id,
            'username': r.username,
            'best_score': int(r.best_score or 0),
            'avg_score': _avg(r.avg_score),
            'total_correct': int(r.total_correct or 0),
            'total_wrong': int(r.total_wrong or 0),
            'games_played': int(r.games_played or 0),
            'last_played': r.last_played.isoformat() if r.last_played else None,
        }
        for r in rows
    ]


def get_user_best_score(user_id: int) -> int:
    best = db.session.query(func.max(GameSession.score)).filter(GameSession.user_id == user_id).scalar()
    return int(best or 0)


def get_user_rank(user_id: int) -> int:
    """1-based position by best score across all sessions ever played.

    No time window applies here, unlike ``get_leaderboard``. Users without
    sessions count as a best score of 0.
    """
    best = get_user_best_score(user_id)
    ahead = (
        db.session.query(func.count(func.distinct(GameSession.user_id)))
        .filter(GameSession.score > best)
        .scalar()
    )
    return int(ahead or 0) + 1
