from flask import Blueprint, request, redirect, url_for, render_template, flash, current_app
from marshmallow import ValidationError

from fitchallenge.schemas import GoalSchema, PasswordChangeSchema, first_error
from fitchallenge.services import AuthError
from fitchallenge.services import progress
from fitchallenge.services import users as user_service
from fitchallenge.utils.decorators import inject_current_user

profile_bp = Blueprint("profile", __name__)
goal_schema = GoalSchema()
password_schema = PasswordChangeSchema()


@profile_bp.route("", methods=["GET"])
@inject_current_user
def profile(current_user):
    counts = user_service.user_counts(current_user.id)
    goal = current_user.goal_exercises or 0
    return render_template(
        "profile.html",
        title="Profile",
        user=current_user,
        goal=goal,
        goal_percent=progress.progress_percent(counts["exercise_count"], goal),
        **counts,
    )


@profile_bp.route("/goal", methods=["POST"])
@inject_current_user
def update_goal(current_user):
    try:
        data = goal_schema.load(request.form)
    except ValidationError as e:
        flash(first_error(e), "error")
        return redirect(url_for("profile.profile"))

    user_service.update_goal(current_user, data["goal_exercises"])
    flash("Goal updated.", "success")
    return redirect(url_for("profile.profile"))


@profile_bp.route("/password", methods=["POST"])
@inject_current_user
def update_password(current_user):
    try:
        data = password_schema.load(request.form)
        user_service.change_password(current_user, data["current_password"], data["new_password"])
    except ValidationError as e:
        flash(first_error(e), "error")
        return redirect(url_for("profile.profile"))
    except AuthError as e:
        flash(e.message, e.category)
        return redirect(url_for("profile.profile"))

    current_app.logger.info("User %s changed their password", current_user.id)
    flash("Password updated.", "success")
    return redirect(url_for("profile.profile"))
