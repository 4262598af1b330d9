from functools import wraps
from flask import Blueprint, render_template, redirect, url_for, flash, g

from passport_web.session_store import get_session_store

common_bp = Blueprint('common', __name__)


def login_required(f):
    """Gate a view on the presence of a session token; the backend does the real checks."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        store = get_session_store()
        if not store.is_authenticated():
            flash("Please log in to access this page.", "warning")
            return redirect(url_for("auth.login"))
        g.session_store = store
        return f(*args, **kwargs)
    return decorated_function


def session_expired():
    """A protected read came back 401: drop the session and send the user to log in."""
    g.session_store.clear()
    flash("Your session has expired. Please log in again.", "warning")
    return redirect(url_for("auth.login"))


@common_bp.route("/", endpoint="home")
def home():
    store = get_session_store()
    return render_template("home.html", user=store.get_user(), authenticated=store.is_authenticated())
