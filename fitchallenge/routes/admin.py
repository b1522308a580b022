from flask import Blueprint, render_template, redirect, url_for, flash, current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from fitchallenge.extensions import db
from fitchallenge.models import User, Challenge, ChallengeParticipant, ExerciseLog
from fitchallenge.services import users as user_service
from fitchallenge.utils.decorators import admin_required

admin_bp = Blueprint("admin", __name__)


def _count_by_user(column):
    return dict(db.session.query(column, func.count()).group_by(column).all())


@admin_bp.route("/users")
@admin_required
def users(current_user):
    all_users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    created = _count_by_user(Challenge.creator_id)
    joined = _count_by_user(ChallengeParticipant.user_id)
    logged = _count_by_user(ExerciseLog.user_id)

    rows = [
        {
            "user": user,
            "created_count": created.get(user.id, 0),
            "joined_count": joined.get(user.id, 0),
            "exercise_count": logged.get(user.id, 0),
        }
        for user in all_users
    ]
    return render_template("admin/users.html", title="Users", rows=rows)


@admin_bp.route("/users/<int:user_id>/reset-password", methods=["POST"])
@admin_required
def reset_password(user_id, current_user):
    user = db.session.get(User, user_id)
    if not user:
        flash("User not found.", "error")
        return redirect(url_for("admin.users"))

    temporary = user_service.reset_password(user)
    flash(f"Temporary password for {user.email}: {temporary}", "success")
    return redirect(url_for("admin.users"))


@admin_bp.route("/users/<int:user_id>/delete", methods=["POST"])
@admin_required
def delete_user(user_id, current_user):
    user = db.session.get(User, user_id)
    if not user:
        flash("User not found.", "error")
        return redirect(url_for("admin.users"))
    if user.id == current_user.id:
        flash("You can't delete your own account.", "error")
        return redirect(url_for("admin.users"))

    try:
        user_service.delete_user(user)
    except SQLAlchemyError as e:
        current_app.logger.error("Error deleting user %s: %s", user_id, e)
        flash("Could not delete the user. Please try again.", "error")
        return redirect(url_for("admin.users"))

    flash("User deleted.", "success")
    return redirect(url_for("admin.users"))
