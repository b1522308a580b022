import secrets
from datetime import date

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from fitchallenge.extensions import db
from fitchallenge.models import User, Challenge, ChallengeParticipant, ExerciseLog
from fitchallenge.models.challenge import STATUS_ACTIVE, STATUS_CLOSED
from .errors import ChallengeError
from .users import normalize_email

INVITE_CODE_BYTES = 4


# =========================================================
# Lookups
# =========================================================

def get_challenge(challenge_id):
    challenge = db.session.get(Challenge, challenge_id)
    if not challenge:
        raise ChallengeError("Challenge not found.")
    return challenge


def find_by_invite_code(code):
    code = (code or "").strip().upper()
    if not code:
        raise ChallengeError("Enter an invite code.")
    challenge = Challenge.query.filter_by(invite_code=code).first()
    if not challenge:
        raise ChallengeError("Invalid invite code.")
    return challenge


def is_participant(user_id, challenge_id):
    return (
        ChallengeParticipant.query
        .filter_by(user_id=user_id, challenge_id=challenge_id)
        .first()
        is not None
    )


def can_view(user, challenge):
    return challenge.is_owned_by(user) or is_participant(user.id, challenge.id)


def user_challenges(user):
    """Challenges the user created or takes part in, soonest deadline first."""
    joined_ids = db.select(ChallengeParticipant.challenge_id).where(
        ChallengeParticipant.user_id == user.id
    )
    return (
        Challenge.query
        .filter(or_(Challenge.creator_id == user.id, Challenge.id.in_(joined_ids)))
        .order_by(Challenge.end_date.asc(), Challenge.id.asc())
        .all()
    )


def joined_active_challenges(user):
    return (
        Challenge.query
        .join(ChallengeParticipant, ChallengeParticipant.challenge_id == Challenge.id)
        .filter(ChallengeParticipant.user_id == user.id, Challenge.status == STATUS_ACTIVE)
        .order_by(Challenge.end_date.asc(), Challenge.id.asc())
        .all()
    )


def recent_logs(challenge, limit=10):
    return (
        ExerciseLog.query
        .filter_by(challenge_id=challenge.id)
        .order_by(ExerciseLog.logged_on.desc(), ExerciseLog.id.desc())
        .limit(limit)
        .all()
    )


# =========================================================
# Invite codes
# =========================================================

def generate_invite_code():
    while True:
        code = secrets.token_hex(INVITE_CODE_BYTES).upper()
        if not Challenge.query.filter_by(invite_code=code).first():
            return code


def ensure_invite_code(challenge):
    """Backfill a code for challenges created without one. Existing codes never change."""
    if not challenge.invite_code:
        challenge.invite_code = generate_invite_code()
        db.session.commit()
        current_app.logger.info("Generated invite code for challenge %s", challenge.id)
    return challenge.invite_code


# =========================================================
# Lifecycle
# =========================================================

def create_challenge(creator, data):
    """Create a challenge and enrol its creator as the first participant."""
    challenge = Challenge(
        title=data["title"],
        description=data.get("description"),
        start_date=data["start_date"],
        end_date=data["end_date"],
        goal_count=data["goal_count"],
        group_goal=data.get("group_goal"),
        prize=data.get("prize"),
        penalty=data.get("penalty"),
        status=STATUS_ACTIVE,
        invite_code=generate_invite_code(),
        creator_id=creator.id,
    )
    try:
        db.session.add(challenge)
        db.session.flush()
        db.session.add(ChallengeParticipant(user_id=creator.id, challenge_id=challenge.id))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    current_app.logger.info("User %s created challenge %s", creator.id, challenge.id)
    return challenge


def _require_owner(user, challenge, action):
    if not challenge.is_owned_by(user):
        raise ChallengeError(f"Only the creator can {action} this challenge.")


def join_challenge(user, challenge):
    """Enrol ``user``; returns False when they were already a participant."""
    if is_participant(user.id, challenge.id):
        return False
    if not challenge.is_active:
        raise ChallengeError("This challenge is closed.")

    db.session.add(ChallengeParticipant(user_id=user.id, challenge_id=challenge.id))
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return False
    current_app.logger.info("User %s joined challenge %s", user.id, challenge.id)
    return True


def add_participant(owner, challenge, email):
    _require_owner(owner, challenge, "add participants to")
    user = User.query.filter_by(email=normalize_email(email)).first()
    if not user:
        raise ChallengeError("No user registered with this email.")
    return user, join_challenge(user, challenge)


def log_activity(user, challenge, activity, logged_on=None):
    if not is_participant(user.id, challenge.id):
        raise ChallengeError("Join the challenge before logging activities.")
    if not challenge.is_active:
        raise ChallengeError("This challenge is closed.")

    log = ExerciseLog(
        user_id=user.id,
        challenge_id=challenge.id,
        count=1,
        activity=activity,
        logged_on=logged_on or date.today(),
    )
    db.session.add(log)
    db.session.commit()
    return log


def log_to_joined(user, activity, logged_on=None):
    """Record one activity in every active challenge the user takes part in."""
    challenges = joined_active_challenges(user)
    if not challenges:
        raise ChallengeError("Join a challenge before logging activities.")

    logged_on = logged_on or date.today()
    try:
        for challenge in challenges:
            db.session.add(ExerciseLog(
                user_id=user.id,
                challenge_id=challenge.id,
                count=1,
                activity=activity,
                logged_on=logged_on,
            ))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return challenges


def close_challenge(user, challenge):
    _require_owner(user, challenge, "close")
    if challenge.status == STATUS_CLOSED:
        raise ChallengeError("This challenge is already closed.", "info")
    challenge.status = STATUS_CLOSED
    db.session.commit()
    current_app.logger.info("User %s closed challenge %s", user.id, challenge.id)


def delete_challenge(user, challenge):
    """Delete a challenge together with its participants and logs."""
    _require_owner(user, challenge, "delete")
    challenge_id = challenge.id
    try:
        db.session.delete(challenge)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    current_app.logger.info("User %s deleted challenge %s", user.id, challenge_id)
