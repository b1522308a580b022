# fitchallenge/utils/decorators.py
from functools import wraps
from flask import redirect, url_for, flash
from flask_jwt_extended import get_jwt_identity, jwt_required, unset_jwt_cookies
from fitchallenge.extensions import db
from fitchallenge.models.user import User


def login_redirect(message, category="error"):
    """Send the visitor to the login page and drop their session cookie."""
    flash(message, category)
    response = redirect(url_for("auth.login"))
    unset_jwt_cookies(response)
    return response


def inject_current_user(view_func):
    """
    Require a valid session cookie and pass the logged-in user to the view
    as the ``current_user`` keyword argument.
    """
    @wraps(view_func)
    @jwt_required()
    def wrapper(*args, **kwargs):
        user = db.session.get(User, int(get_jwt_identity()))
        if not user:
            # account removed while the cookie was still valid
            return login_redirect("Your session has ended. Please log in again.")

        kwargs['current_user'] = user
        return view_func(*args, **kwargs)
    return wrapper


def admin_required(view_func):
    @wraps(view_func)
    @inject_current_user
    def wrapper(*args, **kwargs):
        if not kwargs['current_user'].is_admin:
            flash("You don't have permission to view this page.", "error")
            return redirect(url_for("dashboard.dashboard"))
        return view_func(*args, **kwargs)
    return wrapper
