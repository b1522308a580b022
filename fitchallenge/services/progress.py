"""
Progress and leaderboard arithmetic for challenges.

Totals are counts of ``ExerciseLog`` rows; every log entry counts once.
"""
import math
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from sqlalchemy import func

from fitchallenge.extensions import db
from fitchallenge.models import User, ChallengeParticipant, ExerciseLog


@dataclass
class LeaderboardRow:
    position: int
    user_id: int
    name: str
    total: int
    remaining: int
    percent: int


def progress_percent(total, goal) -> int:
    """Percentage of ``goal`` reached by ``total``, rounded half up and clamped to [0, 100]."""
    if not goal or goal <= 0:
        return 0
    percent = math.floor(total / goal * 100 + 0.5)
    return max(min(percent, 100), 0)


def days_remaining(end_date: date, today: Optional[date] = None) -> int:
    """Calendar days left until ``end_date``, never negative."""
    today = today or date.today()
    return max((end_date - today).days, 0)


def user_total(user_id, challenge_id) -> int:
    return (
        db.session.query(func.count(ExerciseLog.id))
        .filter(ExerciseLog.user_id == user_id, ExerciseLog.challenge_id == challenge_id)
        .scalar()
    ) or 0


def challenge_total(challenge_id) -> int:
    return (
        db.session.query(func.count(ExerciseLog.id))
        .filter(ExerciseLog.challenge_id == challenge_id)
        .scalar()
    ) or 0


def participant_count(challenge_id) -> int:
    return ChallengeParticipant.query.filter_by(challenge_id=challenge_id).count()


def leaderboard(challenge) -> List[LeaderboardRow]:
    """Participants ranked by logged total (desc), ties broken by name (asc)."""
    total = func.count(ExerciseLog.id).label("total")
    rows = (
        db.session.query(User.id, User.name, total)
        .join(ChallengeParticipant, ChallengeParticipant.user_id == User.id)
        .outerjoin(
            ExerciseLog,
            (ExerciseLog.user_id == User.id)
            & (ExerciseLog.challenge_id == ChallengeParticipant.challenge_id),
        )
        .filter(ChallengeParticipant.challenge_id == challenge.id)
        .group_by(User.id, User.name)
        .order_by(total.desc(), User.name.asc())
        .all()
    )
    return [
        LeaderboardRow(
            position=index,
            user_id=row.id,
            name=row.name,
            total=row.total,
            remaining=max(challenge.goal_count - row.total, 0),
            percent=progress_percent(row.total, challenge.goal_count),
        )
        for index, row in enumerate(rows, start=1)
    ]


def position_of(user_id, rows) -> Optional[int]:
    for row in rows:
        if row.user_id == user_id:
            return row.position
    return None


def group_progress(challenge) -> Optional[dict]:
    if not challenge.group_goal:
        return None
    total = challenge_total(challenge.id)
    return {
        "total": total,
        "goal": challenge.group_goal,
        "remaining": max(challenge.group_goal - total, 0),
        "percent": progress_percent(total, challenge.group_goal),
    }


def challenge_stats(challenge, user_id, today: Optional[date] = None) -> dict:
    """Per-user card numbers shown on the dashboard."""
    total = user_total(user_id, challenge.id)
    return {
        "participant_count": participant_count(challenge.id),
        "user_total": total,
        "progress_percent": progress_percent(total, challenge.goal_count),
        "days_remaining": days_remaining(challenge.end_date, today),
    }
