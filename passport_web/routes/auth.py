from flask import Blueprint, render_template, request, redirect, url_for, flash, session, current_app

from passport_web.countdown import CountdownRegistry
from passport_web.otp import OtpFlow, OtpState
from passport_web.routing import route_for_role, login_route_for
from passport_web.services import auth_service
from passport_web.services.auth_service import Credentials
from passport_web.session_store import get_session_store
from passport_web.validation import validate_login, validate_registration, validate_email

auth_bp = Blueprint('auth', __name__)

LOGIN_TITLES = {
    "patient": "Patient Login",
    "doctor": "Doctor Login",
    "hospital": "Hospital Login",
}

REGISTER_ROUTES = {
    "patient": "auth.register",
    "hospital": "auth.hospital_register",
}


def _otp_flow(pending, store):
    cfg = current_app.config
    return OtpFlow(
        pending["email"], store, CountdownRegistry(session),
        purpose=pending.get("purpose", "login"),
        auto_send_seconds=cfg["OTP_AUTO_SEND_COUNTDOWN"],
        resend_seconds=cfg["OTP_RESEND_COUNTDOWN"],
    )


def _start_otp(email, user_type, purpose):
    session["otp_pending"] = {
        "email": email,
        "user_type": user_type,
        "purpose": purpose,
        "auto_sent": False,
    }
    return redirect(url_for("auth.otp"))


def _back_url(pending):
    if pending.get("purpose") == "registration" and pending.get("user_type") in REGISTER_ROUTES:
        return url_for(REGISTER_ROUTES[pending["user_type"]])
    return login_route_for(pending.get("user_type"))


def _render_otp(pending, flow, error=None):
    return render_template(
        "otp.html",
        email=pending["email"],
        user_type=pending.get("user_type", "patient"),
        purpose=pending.get("purpose", "login"),
        resend_wait=flow.resend_wait(),
        back_url=_back_url(pending),
        error=error,
    )


def _login(user_type):
    errors = {}
    identifier = ""
    if request.method == "POST":
        identifier = (request.form.get("identifier") or request.form.get("nationalId")
                      or request.form.get("email") or "").strip()
        password = request.form.get("password", "")
        errors = validate_login(identifier, password, current_app.config["MIN_PASSWORD_LENGTH"])
        if not errors:
            store = get_session_store()
            result = auth_service.login(Credentials(identifier, password), store)
            if result.ok and result.requires_otp:
                flash("Please verify the code sent to your email to finish signing in.", "info")
                return _start_otp(result.email, user_type, "login")
            if result.ok:
                flash("Login successful!", "success")
                return redirect(route_for_role(result.user.get("role")))
            flash(result.error, "danger")
    return render_template("login.html", user_type=user_type, title=LOGIN_TITLES[user_type],
                           identifier=identifier, errors=errors)


@auth_bp.route("/login", methods=["GET", "POST"], endpoint="login")
def login():
    return _login("patient")


@auth_bp.route("/doctor/login", methods=["GET", "POST"], endpoint="doctor_login")
def doctor_login():
    return _login("doctor")


@auth_bp.route("/hospital/login", methods=["GET", "POST"], endpoint="hospital_login")
def hospital_login():
    return _login("hospital")


def _register(user_type):
    form = {}
    errors = {}
    if request.method == "POST":
        form = {k: v.strip() if k not in ("password", "confirmPassword") else v
                for k, v in request.form.to_dict().items()}
        errors = validate_registration(form, user_type, current_app.config["MIN_PASSWORD_LENGTH"])
        if not errors:
            ok, result = auth_service.register(form, user_type)
            if ok:
                flash("Registration successful! Please verify your email.", "success")
                return _start_otp(result, user_type, "registration")
            flash(result, "danger")
    return render_template("register.html", user_type=user_type, form=form, errors=errors)


@auth_bp.route("/register", methods=["GET", "POST"], endpoint="register")
def register():
    return _register("patient")


@auth_bp.route("/hospital/register", methods=["GET", "POST"], endpoint="hospital_register")
def hospital_register():
    return _register("hospital")


@auth_bp.route("/otp", methods=["GET"], endpoint="otp")
def otp():
    pending = session.get("otp_pending")
    if not pending or not pending.get("email"):
        flash("Invalid Access: please sign in or register first.", "danger")
        return redirect(url_for("common.home"))

    flow = _otp_flow(pending, get_session_store())
    if not pending.get("auto_sent"):
        pending = dict(pending, auto_sent=True)
        session["otp_pending"] = pending
        ok, error = flow.send(automatic=True)
        if ok:
            flash(f"OTP has been sent to {pending['email']}. Please check your email.", "success")
        else:
            flash(error, "danger")
    return _render_otp(pending, flow)


@auth_bp.route("/otp/resend", methods=["POST"], endpoint="otp_resend")
def otp_resend():
    pending = session.get("otp_pending")
    if not pending or not pending.get("email"):
        return redirect(url_for("common.home"))

    ok, error = _otp_flow(pending, get_session_store()).send(automatic=False)
    if ok:
        flash(f"A new OTP has been sent to {pending['email']}.", "success")
    else:
        flash(error, "warning")
    return redirect(url_for("auth.otp"))


@auth_bp.route("/otp/verify", methods=["POST"], endpoint="otp_verify")
def otp_verify():
    pending = session.get("otp_pending")
    if not pending or not pending.get("email"):
        flash("Invalid Access: please sign in or register first.", "danger")
        return redirect(url_for("common.home"))

    flow = _otp_flow(pending, get_session_store())
    outcome = flow.submit(request.form.get("otp_code", ""))
    if outcome.state is OtpState.VERIFIED:
        session.pop("otp_pending", None)
        if pending.get("purpose") == "registration":
            flash("Email verified! Redirecting to your dashboard...", "success")
        else:
            flash("Login successful! Redirecting to your dashboard...", "success")
        return render_template("redirecting.html", target=outcome.redirect_to,
                               delay=current_app.config["OTP_REDIRECT_DELAY"])
    if outcome.state is OtpState.REJECTED:
        flash("Verification failed.", "danger")
    return _render_otp(pending, flow, error=outcome.error)


@auth_bp.route("/verify-email", methods=["GET"], endpoint="verify_email")
def verify_email():
    token = request.args.get("token")
    if not token:
        return render_template("verify_email.html", status="error", message="No verification token provided")
    ok, message = auth_service.verify_email(token)
    if ok:
        flash("Your email has been verified. You can now log in to your account.", "success")
    return render_template("verify_email.html", status="success" if ok else "error", message=message)


@auth_bp.route("/resend-verification", methods=["POST"], endpoint="resend_verification")
def resend_verification():
    email = request.form.get("email", "").strip()
    if not validate_email(email):
        flash("Please enter your email address", "danger")
        return render_template("verify_email.html", status="error", message="Email required")
    ok, error = auth_service.resend_verification(email)
    if ok:
        flash("Verification email sent! Please check your email for the verification link.", "success")
        return render_template("verify_email.html", status="pending", message=f"Verification link sent to {email}")
    flash(error, "danger")
    return render_template("verify_email.html", status="error", message=error)


@auth_bp.route("/logout", endpoint="logout")
def logout():
    auth_service.logout(get_session_store())
    session.pop("otp_pending", None)
    flash("You have been logged out.", "info")
    return redirect(url_for("auth.login"))
