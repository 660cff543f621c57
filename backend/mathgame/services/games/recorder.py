import json
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from mathgame import db
from mathgame.models import User, GameSession, ProblemAttempt
from .errors import ValidationError, NotFound, StorageError
from .problems import normalize_operations, parse_answer


def _as_count(value, name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f'{name} must be an integer')
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f'{name} must be an integer')
        value = int(value)
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an integer')
    if count < 0:
        raise ValidationError(f'{name} must not be negative')
    return count


def _as_operand(value, name: str) -> int:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f'Attempt {name} must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Attempt {name} must be an integer')


def _build_attempts(attempts, operations, correct: int, wrong: int):
    if attempts is None:
        return []
    if not isinstance(attempts, list):
        raise ValidationError('attempts must be a list')
    rows = []
    for idx, item in enumerate(attempts):
        if not isinstance(item, dict):
            raise ValidationError(f'Attempt {idx} must be an object')
        op = item.get('operation')
        if op not in operations:
            raise ValidationError(f'Attempt {idx} uses an operation not enabled for this game: {op}')
        correct_answer = _as_operand(item.get('correctAnswer'), 'correctAnswer')
        # Unparseable answers are dropped client-side and never reach history
        user_answer = parse_answer(item.get('userAnswer'))
        if user_answer is None:
            raise ValidationError(f'Attempt {idx} has no valid answer')
        is_correct = item.get('isCorrect')
        if is_correct is None:
            is_correct = user_answer == correct_answer
        elif not isinstance(is_correct, bool):
            raise ValidationError(f'Attempt {idx} isCorrect must be a boolean')
        rows.append(ProblemAttempt(
            operation=op,
            num1=_as_operand(item.get('num1'), 'num1'),
            num2=_as_operand(item.get('num2'), 'num2'),
            correct_answer=correct_answer,
            user_answer=user_answer,
            is_correct=is_correct,
        ))
    if rows:
        n_correct = sum(1 for r in rows if r.is_correct)
        if n_correct != correct or len(rows) - n_correct != wrong:
            raise ValidationError('attempts do not match the correct/wrong counts')
    return rows


def record_game(user_id, score, correct, wrong, total_problems=None, operations=None,
                attempts=None, played_at=None) -> GameSession:
    """Validate and persist one finished game together with its attempts.

    The session and attempt rows are committed in a single transaction, so
    readers see either the whole game or nothing.
    """
    if not user_id or score is None or correct is None or wrong is None:
        raise ValidationError('Missing required fields')
    user_id = _as_count(user_id, 'userId')
    score = _as_count(score, 'score')
    correct = _as_count(correct, 'correct')
    wrong = _as_count(wrong, 'wrong')
    if total_problems is None:
        total_problems = correct + wrong
    else:
        total_problems = _as_count(total_problems, 'totalProblems')
        if total_problems != correct + wrong:
            raise ValidationError('totalProblems must equal correct + wrong')
    if total_problems == 0:
        raise ValidationError('A game must contain at least one answered problem')

    ops = normalize_operations(operations)

    if current_app.config.get('STRICT_SCORE_CHECK'):
        points = int(current_app.config.get('POINTS_PER_CORRECT', 10))
        if score != correct * points:
            raise ValidationError(f'score must be {points} points per correct answer')

    attempt_rows = _build_attempts(attempts, ops, correct, wrong)

    user = db.session.get(User, user_id)
    if not user:
        raise NotFound('User not found')

    game = GameSession(
        user_id=user.id,
        score=score,
        correct=correct,
        wrong=wrong,
        total_problems=total_problems,
        operations=json.dumps(list(ops)),
    )
    if played_at is not None:
        game.played_at = played_at
    game.attempts = attempt_rows
    try:
        db.session.add(game)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"[record_game] user={user_id} failed to save game")
        raise StorageError('Failed to save game')

    current_app.logger.info(
        f"[record_game] user={user.id} game={game.id} score={score} correct={correct} wrong={wrong} attempts={len(attempt_rows)}"
    )
    return game


def get_game(game_id: int) -> GameSession:
    game = db.session.get(GameSession, game_id)
    if not game:
        raise NotFound('Game not found')
    return game
