from datetime import date

from flask import Blueprint, request, redirect, url_for, render_template, flash, session, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from fitchallenge.extensions import db
from fitchallenge.models import User
from fitchallenge.routes.auth import PENDING_INVITE_KEY
from fitchallenge.schemas import (
    ChallengeSchema, ActivitySchema, InviteCodeSchema, ParticipantSchema, first_error
)
from fitchallenge.services import ChallengeError
from fitchallenge.services import challenges as challenge_service
from fitchallenge.services import progress
from fitchallenge.utils.decorators import inject_current_user

challenges_bp = Blueprint("challenges", __name__)
challenge_schema = ChallengeSchema()
activity_schema = ActivitySchema()
invite_schema = InviteCodeSchema()
participant_schema = ParticipantSchema()


def _back_to(challenge_id):
    return redirect(url_for("challenges.view", challenge_id=challenge_id))


def _to_dashboard(error):
    flash(error.message, error.category)
    return redirect(url_for("dashboard.dashboard"))


# =========================================================
# Create / view
# =========================================================

@challenges_bp.route("/challenges/new", methods=["GET"])
@inject_current_user
def new_challenge(current_user):
    return render_template("challenges/new.html", title="New challenge", today=date.today().isoformat())


@challenges_bp.route("/challenges/new", methods=["POST"])
@inject_current_user
def create_challenge(current_user):
    try:
        data = challenge_schema.load(request.form)
        challenge = challenge_service.create_challenge(current_user, data)
    except ValidationError as e:
        flash(first_error(e), "error")
        return redirect(url_for("challenges.new_challenge"))
    except SQLAlchemyError as e:
        current_app.logger.error("Error creating challenge: %s", e)
        flash("Could not create the challenge. Please try again.", "error")
        return redirect(url_for("challenges.new_challenge"))

    flash("Challenge created!", "success")
    return _back_to(challenge.id)


@challenges_bp.route("/challenges/<int:challenge_id>", methods=["GET"])
@inject_current_user
def view(challenge_id, current_user):
    try:
        challenge = challenge_service.get_challenge(challenge_id)
    except ChallengeError as e:
        return _to_dashboard(e)

    if not challenge_service.can_view(current_user, challenge):
        flash("Only participants can view this challenge.", "error")
        return redirect(url_for("dashboard.dashboard"))

    is_owner = challenge.is_owned_by(current_user)
    invite_code = challenge_service.ensure_invite_code(challenge)
    rows = progress.leaderboard(challenge)

    return render_template(
        "challenges/detail.html",
        title=challenge.title,
        challenge=challenge,
        is_owner=is_owner,
        has_joined=challenge_service.is_participant(current_user.id, challenge.id),
        leaderboard=rows,
        position=progress.position_of(current_user.id, rows),
        group=progress.group_progress(challenge),
        days_remaining=progress.days_remaining(challenge.end_date),
        invite_url=url_for("challenges.redeem_invite", code=invite_code, _external=True),
        recent_logs=challenge_service.recent_logs(challenge),
        today=date.today().isoformat(),
    )


# =========================================================
# Joining
# =========================================================

@challenges_bp.route("/challenges/join", methods=["POST"])
@inject_current_user
def join(current_user):
    try:
        data = invite_schema.load(request.form)
        challenge = challenge_service.find_by_invite_code(data["invite_code"])
        joined = challenge_service.join_challenge(current_user, challenge)
    except ValidationError as e:
        flash(first_error(e), "error")
        return redirect(url_for("dashboard.dashboard"))
    except ChallengeError as e:
        return _to_dashboard(e)

    if joined:
        flash("You're in. Let's train!", "success")
    else:
        flash("You already take part in this challenge.", "info")
    return _back_to(challenge.id)


@challenges_bp.route("/invite/<code>", methods=["GET"])
@jwt_required(optional=True)
def redeem_invite(code):
    identity = get_jwt_identity()
    user = db.session.get(User, int(identity)) if identity else None
    if not user:
        try:
            challenge = challenge_service.find_by_invite_code(code)
        except ChallengeError as e:
            flash(e.message, e.category)
            return redirect(url_for("auth.login"))
        session[PENDING_INVITE_KEY] = challenge.invite_code
        flash(f"Log in or create an account to join {challenge.title}.", "info")
        return redirect(url_for("auth.login"))

    try:
        challenge = challenge_service.find_by_invite_code(code)
        joined = challenge_service.join_challenge(user, challenge)
    except ChallengeError as e:
        return _to_dashboard(e)

    if joined:
        flash("You're in. Let's train!", "success")
    else:
        flash("You already take part in this challenge.", "info")
    return _back_to(challenge.id)


@challenges_bp.route("/challenges/<int:challenge_id>/participants", methods=["POST"])
@inject_current_user
def add_participant(challenge_id, current_user):
    try:
        challenge = challenge_service.get_challenge(challenge_id)
    except ChallengeError as e:
        return _to_dashboard(e)

    try:
        data = participant_schema.load(request.form)
        user, added = challenge_service.add_participant(current_user, challenge, data["email"])
    except ValidationError as e:
        flash(first_error(e), "error")
        return _back_to(challenge.id)
    except ChallengeError as e:
        flash(e.message, e.category)
        return _back_to(challenge.id)

    if added:
        flash(f"{user.name} was added to the challenge.", "success")
    else:
        flash(f"{user.name} already takes part in this challenge.", "info")
    return _back_to(challenge.id)


# =========================================================
# Logging
# =========================================================

@challenges_bp.route("/challenges/<int:challenge_id>/log", methods=["POST"])
@inject_current_user
def log_activity(challenge_id, current_user):
    try:
        challenge = challenge_service.get_challenge(challenge_id)
    except ChallengeError as e:
        return _to_dashboard(e)

    try:
        data = activity_schema.load(request.form)
        challenge_service.log_activity(current_user, challenge, data["activity"], data["logged_on"])
    except ValidationError as e:
        flash(first_error(e), "error")
        return _back_to(challenge.id)
    except ChallengeError as e:
        flash(e.message, e.category)
        return _back_to(challenge.id)

    flash("Workout logged!", "success")
    return _back_to(challenge.id)


# =========================================================
# Owner actions
# =========================================================

@challenges_bp.route("/challenges/<int:challenge_id>/close", methods=["POST"])
@inject_current_user
def close(challenge_id, current_user):
    try:
        challenge = challenge_service.get_challenge(challenge_id)
        challenge_service.close_challenge(current_user, challenge)
    except ChallengeError as e:
        flash(e.message, e.category)
        return redirect(request.referrer or url_for("dashboard.dashboard"))

    flash("Challenge closed.", "success")
    return _back_to(challenge.id)


@challenges_bp.route("/challenges/<int:challenge_id>/delete", methods=["POST"])
@inject_current_user
def delete(challenge_id, current_user):
    try:
        challenge = challenge_service.get_challenge(challenge_id)
        challenge_service.delete_challenge(current_user, challenge)
    except ChallengeError as e:
        flash(e.message, e.category)
        return redirect(request.referrer or url_for("dashboard.dashboard"))
    except SQLAlchemyError as e:
        current_app.logger.error("Error deleting challenge %s: %s", challenge_id, e)
        flash("Could not delete the challenge. Please try again.", "error")
        return _back_to(challenge_id)

    flash("Challenge deleted.", "success")
    return redirect(url_for("dashboard.dashboard"))
