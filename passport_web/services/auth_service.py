import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from passport_web.services.api_client import (
    safe_get, safe_post, handle_api_response, response_status
)

logger = logging.getLogger("passport-frontend")


@dataclass
class Credentials:
    """A single login attempt; lives only for the request that submits it."""
    identifier: str
    password: str = field(repr=False)

    def payload(self) -> Dict[str, str]:
        identifier = self.identifier.strip()
        body = {"identifier": identifier, "password": self.password}
        if "@" in identifier:
            body["email"] = identifier.lower()
        else:
            body["nationalId"] = identifier
        return body


@dataclass
class LoginResult:
    ok: bool
    requires_otp: bool = False
    user: Optional[Dict[str, Any]] = None
    token: Optional[str] = None
    email: Optional[str] = None
    error: Optional[str] = None
    status: Optional[int] = None


def login(credentials: Credentials, store) -> LoginResult:
    """POST /auth/login.

    On immediate success the session is written before returning. Any failure
    clears whatever session was there so roles never mix.
    """
    resp = safe_post("/auth/login", json=credentials.payload())
    success, result = handle_api_response(resp)
    status = response_status(resp)

    if not success:
        store.clear()
        logger.info(f"Login rejected (status {status})")
        return LoginResult(ok=False, error=result, status=status)

    if result.get("requiresOTP"):
        email = result.get("email") or (result.get("data") or {}).get("email") or credentials.identifier
        return LoginResult(ok=True, requires_otp=True, email=email, status=status)

    data = result.get("data") or {}
    user, token = data.get("user"), data.get("token")
    if not user or not token:
        store.clear()
        logger.error("Login response missing user or token")
        return LoginResult(ok=False, error="Login error: incomplete response from server", status=status)

    store.save_session(token, user, data.get("refreshToken"))
    return LoginResult(ok=True, user=user, token=token, status=status)


def request_otp(identifier: str, channel: str = "email"):
    resp = safe_post("/auth/request-otp", json={"identifier": identifier, "type": channel})
    success, result = handle_api_response(resp)
    return success, None if success else result


def verify_otp(identifier: str, code: str, purpose: str = "login", channel: str = "email"):
    """Verify a 6-digit code. Returns (ok, data) with data holding user and token, or (False, message)."""
    if purpose == "registration":
        resp = safe_post("/auth/verify-registration-otp", json={"email": identifier, "otpCode": code})
    else:
        resp = safe_post("/auth/verify-otp", json={"identifier": identifier, "otpCode": code, "type": channel})
    success, result = handle_api_response(resp)
    if not success:
        return False, result
    data = result.get("data") or {}
    if not data.get("user") or not data.get("token"):
        logger.error("OTP verification response missing user or token")
        return False, "Verification response incomplete"
    return True, data


def register(payload: Dict[str, Any], user_type: str = "patient"):
    """POST /auth/register; the account then needs OTP verification of its email."""
    body = {k: v for k, v in payload.items() if k != "confirmPassword"}
    body["role"] = user_type
    resp = safe_post("/auth/register", json=body)
    success, result = handle_api_response(resp)
    if not success:
        return False, result
    data = result.get("data") or {}
    email = result.get("email") or data.get("email") or (data.get("user") or {}).get("email") or payload.get("email")
    return True, email


def verify_email(token: str):
    resp = safe_get("/auth/verify-email", params={"token": token})
    success, result = handle_api_response(resp)
    if success:
        return True, result.get("message") or "Email verified successfully!"
    return False, result


def resend_verification(email: str):
    resp = safe_post("/auth/resend-verification", json={"email": email})
    success, result = handle_api_response(resp)
    return success, None if success else result


def load_current_user(store):
    """Refresh the stored user from GET /auth/me; a failed check drops the session."""
    token = store.bearer_token()
    if not token:
        return None
    resp = safe_get("/auth/me", token=token)
    success, result = handle_api_response(resp)
    if not success:
        logger.info(f"Current user check failed (status {response_status(resp)}), clearing session")
        store.clear()
        return None
    data = result.get("data") or result
    user = data.get("user") or data
    if store.get_user() is None:
        store.save_user(user)
    else:
        store.update_user(user)
    return store.get_user()


def logout(store):
    token = store.bearer_token()
    if token:
        resp = safe_post("/auth/logout", token=token)
        success, result = handle_api_response(resp)
        if not success:
            logger.warning(f"Logout request failed: {result}")
    store.clear()
