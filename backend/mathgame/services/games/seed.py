import random
from datetime import timedelta

from mathgame import db
from mathgame.models import User, OPERATIONS, utcnow
from .problems import start_session, submit_answer, next_problem, to_game_payload
from .recorder import record_game


def simulate_session(operations, rng, answers=20, skill=0.7, points_per_correct=10):
    """Play ``answers`` problems, answering correctly with probability ``skill``."""
    session = start_session(operations, rng)
    for _ in range(answers):
        problem = session.current
        guess = problem.correct_answer if rng.random() < skill else problem.correct_answer + rng.randint(1, 5)
        session, _feedback = submit_answer(session, str(guess), points_per_correct)
        session = next_problem(session, rng)
    return session


def seed_demo_data(usernames, games_per_user=5, seed=None) -> int:
    rng = random.Random(seed)
    now = utcnow()
    recorded = 0
    for name in usernames:
        user = User(username=name)
        db.session.add(user)
        db.session.commit()
        skill = rng.uniform(0.5, 0.95)
        for _ in range(games_per_user):
            ops = rng.sample(OPERATIONS, rng.randint(1, len(OPERATIONS)))
            session = simulate_session(ops, rng, answers=rng.randint(10, 40), skill=skill)
            payload = to_game_payload(session, user.id)
            record_game(
                payload['userId'],
                payload['score'],
                payload['correct'],
                payload['wrong'],
                payload['totalProblems'],
                payload['operations'],
                payload['attempts'],
                played_at=now - timedelta(days=rng.randint(0, 40), minutes=rng.randint(0, 600)),
            )
            recorded += 1
    return recorded
