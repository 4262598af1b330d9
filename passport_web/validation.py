import re

OTP_LENGTH = 6
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_otp_input(raw, length=OTP_LENGTH):
    """Keep digits only, capped at the OTP length."""
    return re.sub(r"\D", "", raw or "")[:length]


def validate_otp(code, length=OTP_LENGTH):
    if not code or not code.strip():
        return "Please enter the OTP code"
    if len(code) != length or not code.isdigit():
        return f"OTP code must be {length} digits"
    return None


def validate_email(value):
    return bool(value) and bool(EMAIL_RE.match(value.strip()))


def validate_login(identifier, password, min_length=6):
    """Field -> message for a login form; empty when the form may be submitted."""
    errors = {}
    if not (identifier or "").strip():
        errors["identifier"] = "National ID or email is required"
    if not password:
        errors["password"] = "Password is required"
    elif len(password) < min_length:
        errors["password"] = f"Password must be at least {min_length} characters"
    return errors


def validate_registration(form, user_type="patient", min_length=6):
    errors = {}
    if not (form.get("name") or "").strip():
        errors["name"] = "Name is required"
    if not validate_email(form.get("email")):
        errors["email"] = "Please enter a valid email address"
    if user_type == "patient" and not (form.get("nationalId") or "").strip():
        errors["nationalId"] = "National ID is required"
    password = form.get("password") or ""
    if len(password) < min_length:
        errors["password"] = f"Password must be at least {min_length} characters"
    elif password != (form.get("confirmPassword") or ""):
        errors["confirmPassword"] = "Passwords do not match"
    return errors


def validate_emergency_request(justification, acknowledged, min_length=20):
    """Client-side gate for emergency access; the server still decides."""
    if len((justification or "").strip()) < min_length:
        return f"Please provide a detailed justification (minimum {min_length} characters)"
    if not acknowledged:
        return "You must acknowledge that this access will be logged and audited"
    return None
