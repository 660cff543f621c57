from datetime import timedelta
from sqlalchemy import func, case

from mathgame import db
from mathgame.models import GameSession, ProblemAttempt, OPERATIONS, utcnow


def accuracy_pct(correct, total) -> int:
    """Whole-number percentage of correct answers; 0 when nothing was answered."""
    if not total or total <= 0:
        return 0
    return min(100, max(0, round(100 * (correct or 0) / total)))


def empty_stats() -> dict:
    return {
        'total_games': 0,
        'best_score': 0,
        'avg_score': 0,
        'total_correct': 0,
        'total_wrong': 0,
        'total_problems': 0,
        'accuracy': 0,
        'first_game': None,
        'last_game': None,
    }


def get_user_stats(user_id: int) -> dict:
    row = (
        db.session.query(
            func.count(GameSession.id),
            func.max(GameSession.score),
            func.avg(GameSession.score),
            func.sum(GameSession.correct),
            func.sum(GameSession.wrong),
            func.sum(GameSession.total_problems),
            func.min(GameSession.played_at),
            func.max(GameSession.played_at),
        )
        .filter(GameSession.user_id == user_id)
        .one()
    )
    total_games, best, avg, total_correct, total_wrong, total_problems, first_game, last_game = row
    if not total_games:
        return empty_stats()
    total_correct = int(total_correct or 0)
    total_problems = int(total_problems or 0)
    return {
        'total_games': int(total_games),
        'best_score': int(best or 0),
        'avg_score': round(float(avg or 0), 2),
        'total_correct': total_correct,
        'total_wrong': int(total_wrong or 0),
        'total_problems': total_problems,
        'accuracy': accuracy_pct(total_correct, total_problems),
        'first_game': first_game.isoformat() if first_game else None,
        'last_game': last_game.isoformat() if last_game else None,
    }


def get_recent_games(user_id: int, limit: int = 10) -> list:
    games = (
        GameSession.query.filter_by(user_id=user_id)
        .order_by(GameSession.played_at.desc(), GameSession.id.desc())
        .limit(limit)
        .all()
    )
    return [g.to_dict() for g in games]


def get_operation_stats(user_id: int) -> list:
    correct = func.sum(case((ProblemAttempt.is_correct.is_(True), 1), else_=0))
    rows = (
        db.session.query(
            ProblemAttempt.operation,
            func.count(ProblemAttempt.id),
            correct,
        )
        .join(GameSession, ProblemAttempt.game_id == GameSession.id)
        .filter(GameSession.user_id == user_id)
        .group_by(ProblemAttempt.operation)
        .all()
    )
    order = {op: i for i, op in enumerate(OPERATIONS)}
    out = []
    for operation, total, n_correct in sorted(rows, key=lambda r: order.get(r[0], len(order))):
        total = int(total or 0)
        n_correct = int(n_correct or 0)
        out.append({
            'operation': operation,
            'correct': n_correct,
            'wrong': total - n_correct,
            'total': total,
        })
    return out


def get_trends(days: int = 7, user_id: int = None, now=None) -> list:
    """Games per UTC day over the trailing ``days`` days, oldest first."""
    since = (now or utcnow()) - timedelta(days=days)
    day = func.date(GameSession.played_at)
    query = (
        db.session.query(
            day.label('date'),
            func.count(GameSession.id),
            func.avg(GameSession.score),
            func.max(GameSession.score),
        )
        .filter(GameSession.played_at >= since)
    )
    if user_id is not None:
        query = query.filter(GameSession.user_id == user_id)
    rows = query.group_by(day).order_by(day.asc()).all()
    return [
        {
            'date': str(date),
            'games_played': int(count),
            'avg_score': round(float(avg or 0), 2),
            'max_score': int(max_score or 0),
        }
        for date, count, avg, max_score in rows
    ]
