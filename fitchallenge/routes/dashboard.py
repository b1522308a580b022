from datetime import date

from flask import Blueprint, render_template, redirect, url_for, request, flash, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from fitchallenge.models import ExerciseLog
from fitchallenge.schemas import ActivitySchema, first_error
from fitchallenge.services import ChallengeError
from fitchallenge.services import challenges as challenge_service
from fitchallenge.services import progress
from fitchallenge.utils.decorators import inject_current_user

dashboard_bp = Blueprint("dashboard", __name__)
activity_schema = ActivitySchema()


@dashboard_bp.route("/")
@jwt_required(optional=True)
def index():
    if get_jwt_identity():
        return redirect(url_for("dashboard.dashboard"))
    return redirect(url_for("auth.login"))


@dashboard_bp.route("/dashboard")
@inject_current_user
def dashboard(current_user):
    today = date.today()
    challenges = challenge_service.user_challenges(current_user)

    cards = []
    for challenge in challenges:
        stats = progress.challenge_stats(challenge, current_user.id, today)
        cards.append({"challenge": challenge, **stats})

    # the highlighted challenge is the active one closest to its deadline
    highlighted = next((card for card in cards if card["challenge"].is_active), None)
    position = None
    if highlighted:
        rows = progress.leaderboard(highlighted["challenge"])
        position = progress.position_of(current_user.id, rows)

    exercise_count = ExerciseLog.query.filter_by(user_id=current_user.id).count()
    goal = current_user.goal_exercises or 0

    return render_template(
        "dashboard.html",
        title="Dashboard",
        created_cards=[card for card in cards if card["challenge"].is_owned_by(current_user)],
        joined_cards=[card for card in cards if not card["challenge"].is_owned_by(current_user)],
        highlighted=highlighted,
        position=position or "--",
        exercise_count=exercise_count,
        goal=goal,
        goal_percent=progress.progress_percent(exercise_count, goal),
        today=today.isoformat(),
    )


@dashboard_bp.route("/dashboard/log", methods=["POST"])
@inject_current_user
def quick_log(current_user):
    try:
        data = activity_schema.load(request.form)
        challenges = challenge_service.log_to_joined(current_user, data["activity"], data["logged_on"])
    except ValidationError as e:
        flash(first_error(e), "error")
        return redirect(url_for("dashboard.dashboard"))
    except ChallengeError as e:
        flash(e.message, e.category)
        return redirect(url_for("dashboard.dashboard"))
    except SQLAlchemyError as e:
        current_app.logger.error("Error logging activity for user %s: %s", current_user.id, e)
        flash("Could not save your activity. Please try again.", "error")
        return redirect(url_for("dashboard.dashboard"))

    flash(f"Activity logged in {len(challenges)} challenge(s)!", "success")
    return redirect(url_for("dashboard.dashboard"))
