"""Arithmetic problems and the practice-session context.

A ``PracticeSession`` is an immutable value: every function here takes a
session and returns a new one, so the caller (the browser client, a CLI
simulation, a test) owns where the current session lives. Only answers that
parse as integers are scored and kept in the session history.
"""

import random
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence, Tuple

from mathgame.models import OPERATIONS
from .errors import ValidationError

SYMBOLS = {'add': '+', 'sub': '-', 'mul': '×', 'div': '÷'}

FEEDBACK_CORRECT = 'correct'
FEEDBACK_WRONG = 'wrong'
FEEDBACK_INVALID = 'invalid'


@dataclass(frozen=True)
class Problem:
    operation: str
    operand1: int
    operand2: int
    correct_answer: int

    @property
    def text(self) -> str:
        return f'{self.operand1} {SYMBOLS[self.operation]} {self.operand2} = ?'


@dataclass(frozen=True)
class Attempt:
    problem: Problem
    user_answer: int
    is_correct: bool

    def to_payload(self) -> dict:
        return {
            'operation': self.problem.operation,
            'num1': self.problem.operand1,
            'num2': self.problem.operand2,
            'correctAnswer': self.problem.correct_answer,
            'userAnswer': self.user_answer,
            'isCorrect': self.is_correct,
        }


@dataclass(frozen=True)
class Feedback:
    kind: str
    message: str


@dataclass(frozen=True)
class PracticeSession:
    operations: Tuple[str, ...]
    score: int = 0
    correct: int = 0
    wrong: int = 0
    history: Tuple[Attempt, ...] = field(default_factory=tuple)
    current: Optional[Problem] = None

    @property
    def total_problems(self) -> int:
        return self.correct + self.wrong


def normalize_operations(operations) -> Tuple[str, ...]:
    """Validate a selection of operation kinds; returns it de-duplicated in input order."""
    if isinstance(operations, str) or not operations:
        raise ValidationError('At least one operation must be selected')
    selected = []
    for op in operations:
        if op not in OPERATIONS:
            raise ValidationError(f'Unknown operation: {op}')
        if op not in selected:
            selected.append(op)
    return tuple(selected)


def generate_problem(operations: Sequence[str], rng=random) -> Problem:
    operation = rng.choice(list(operations))
    if operation == 'add':
        a, b = rng.randint(0, 9), rng.randint(0, 9)
        return Problem(operation, a, b, a + b)
    if operation == 'sub':
        a = rng.randint(0, 9)
        b = rng.randint(0, a)
        return Problem(operation, a, b, a - b)
    if operation == 'mul':
        a, b = rng.randint(0, 9), rng.randint(0, 9)
        return Problem(operation, a, b, a * b)
    if operation == 'div':
        divisor = rng.randint(1, 9)
        quotient = rng.randint(0, 9)
        return Problem(operation, divisor * quotient, divisor, quotient)
    raise ValidationError(f'Unknown operation: {operation}')


def parse_answer(raw) -> Optional[int]:
    """Integer value of a submitted answer, or None when it does not parse."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return None


def start_session(operations, rng=random) -> PracticeSession:
    ops = normalize_operations(operations)
    return PracticeSession(operations=ops, current=generate_problem(ops, rng))


def next_problem(session: PracticeSession, rng=random) -> PracticeSession:
    return replace(session, current=generate_problem(session.operations, rng))


def submit_answer(session: PracticeSession, raw_answer, points_per_correct: int = 10):
    """Score an answer against the current problem.

    Returns ``(session, feedback)``. An unparseable answer leaves the session
    untouched; the caller should keep the same problem on screen.
    """
    problem = session.current
    if problem is None:
        raise ValidationError('No problem is waiting for an answer')
    answer = parse_answer(raw_answer)
    if answer is None:
        return session, Feedback(FEEDBACK_INVALID, 'Please enter a valid number!')

    is_correct = answer == problem.correct_answer
    attempt = Attempt(problem=problem, user_answer=answer, is_correct=is_correct)
    if is_correct:
        updated = replace(
            session,
            score=session.score + points_per_correct,
            correct=session.correct + 1,
            history=session.history + (attempt,),
            current=None,
        )
        return updated, Feedback(FEEDBACK_CORRECT, 'Correct! Great job!')
    updated = replace(
        session,
        wrong=session.wrong + 1,
        history=session.history + (attempt,),
        current=None,
    )
    return updated, Feedback(FEEDBACK_WRONG, f'Wrong! The correct answer is {problem.correct_answer}')


def to_game_payload(session: PracticeSession, user_id: int) -> dict:
    """Body for ``POST /api/games`` describing a finished session."""
    return {
        'userId': user_id,
        'score': session.score,
        'correct': session.correct,
        'wrong': session.wrong,
        'totalProblems': session.total_problems,
        'operations': list(session.operations),
        'attempts': [a.to_payload() for a in session.history],
    }
