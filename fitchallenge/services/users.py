import secrets

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from fitchallenge.extensions import db
from fitchallenge.models import User, Challenge, ChallengeParticipant, ExerciseLog
from .errors import AuthError

DEFAULT_ROLE = "participant"
ADMIN_ROLE = "admin"


def normalize_email(email):
    return (email or "").strip().lower()


def register_user(name, email, password, role=DEFAULT_ROLE):
    email = normalize_email(email)
    if User.query.filter_by(email=email).first():
        raise AuthError("This email is already registered.")

    user = User(name=name.strip(), email=email, role=role, goal_exercises=0)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("Registered user %s (%s)", user.id, user.email)
    return user


def authenticate(email, password):
    user = User.query.filter_by(email=normalize_email(email)).first()
    if not user or not user.check_password(password or ""):
        current_app.logger.info("Login failed for %s", normalize_email(email))
        raise AuthError("Invalid email or password.")
    return user


def change_password(user, current_password, new_password):
    if not user.check_password(current_password or ""):
        raise AuthError("Current password is incorrect.")
    user.set_password(new_password)
    db.session.commit()


def update_goal(user, goal):
    user.goal_exercises = goal
    db.session.commit()


def reset_password(user):
    """Replace the password with a random temporary one and return it."""
    temporary = secrets.token_urlsafe(9)
    user.set_password(temporary)
    db.session.commit()
    current_app.logger.info("Password reset for user %s", user.id)
    return temporary


def delete_user(user):
    """Remove a user with their challenges, participations and logs in one transaction."""
    user_id = user.id
    try:
        db.session.delete(user)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    current_app.logger.info("Deleted user %s", user_id)


def user_counts(user_id):
    return {
        "created_count": Challenge.query.filter_by(creator_id=user_id).count(),
        "joined_count": ChallengeParticipant.query.filter_by(user_id=user_id).count(),
        "exercise_count": ExerciseLog.query.filter_by(user_id=user_id).count(),
    }


def ensure_admin(email, name, password):
    """Create an admin account, or promote an existing one."""
    email = normalize_email(email)
    user = User.query.filter_by(email=email).first()
    if user:
        user.role = ADMIN_ROLE
        db.session.commit()
        return user, False
    return register_user(name, email, password, role=ADMIN_ROLE), True
