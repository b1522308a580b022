from flask import Blueprint, request, redirect, url_for, render_template, flash, session, current_app
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies
from marshmallow import ValidationError

from fitchallenge.extensions import limiter
from fitchallenge.schemas import RegisterSchema, LoginSchema, first_error
from fitchallenge.services import AuthError, ChallengeError
from fitchallenge.services import challenges as challenge_service
from fitchallenge.services import users as user_service

auth_bp = Blueprint("auth", __name__)
register_schema = RegisterSchema()
login_schema = LoginSchema()

PENDING_INVITE_KEY = "pending_invite"


def redeem_pending_invite(user):
    """Join the challenge whose invite link was opened before logging in, if any."""
    code = session.pop(PENDING_INVITE_KEY, None)
    if not code:
        return None
    try:
        challenge = challenge_service.find_by_invite_code(code)
        if challenge_service.join_challenge(user, challenge):
            flash(f"You joined {challenge.title}. Let's train!", "success")
        else:
            flash("You already take part in this challenge.", "info")
    except ChallengeError as e:
        flash(e.message, e.category)
        return None
    return challenge


@auth_bp.route("/register", methods=["GET"])
def register_page():
    return render_template("auth/register.html", title="Create account")


@auth_bp.route("/register", methods=["POST"])
@limiter.limit("5 per hour", methods=["POST"])
def register():
    try:
        data = register_schema.load(request.form)
        user_service.register_user(data["name"], data["email"], data["password"])
    except ValidationError as e:
        flash(first_error(e), "error")
        return redirect(url_for("auth.register_page"))
    except AuthError as e:
        flash(e.message, e.category)
        return redirect(url_for("auth.register_page"))

    flash("Account created. Please log in.", "success")
    return redirect(url_for("auth.login"))


@auth_bp.route("/login", methods=["GET"])
def login():
    return render_template("auth/login.html", title="Log in")


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("10 per 15 minutes", methods=["POST"])
def login_post():
    try:
        data = login_schema.load(request.form)
        user = user_service.authenticate(data["email"], data["password"])
    except ValidationError as e:
        flash(first_error(e), "error")
        return redirect(url_for("auth.login"))
    except AuthError as e:
        flash(e.message, e.category)
        return redirect(url_for("auth.login"))

    current_app.logger.info("Login successful for user %s", user.id)
    access_token = create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role, "name": user.name},
    )

    challenge = redeem_pending_invite(user)
    if challenge:
        response = redirect(url_for("challenges.view", challenge_id=challenge.id))
    else:
        response = redirect(url_for("dashboard.dashboard"))
    set_access_cookies(response, access_token)
    return response


@auth_bp.route("/logout", methods=["GET"])
def logout():
    response = redirect(url_for("auth.login"))
    unset_jwt_cookies(response)
    session.pop(PENDING_INVITE_KEY, None)
    return response
