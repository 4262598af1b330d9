"""OTP verification flow.

States run ``IDLE -> SUBMITTING -> VERIFIED | REJECTED`` and ``REJECTED ->
IDLE`` on retry. A code is only sent to the backend once it is exactly six
digits. Resends are gated by a per-identifier countdown that is advisory
only; the backend does the real rate limiting.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from passport_web.routing import route_for_role
from passport_web.services import auth_service
from passport_web.validation import normalize_otp_input, validate_otp

logger = logging.getLogger("passport-frontend")

INVALID_CODE = "Invalid OTP code. Please try again."


class OtpState(enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    VERIFIED = "verified"
    REJECTED = "rejected"


@dataclass
class OtpOutcome:
    state: OtpState
    error: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    redirect_to: Optional[str] = None


class OtpFlow:
    def __init__(self, identifier, store, countdowns, purpose="login", channel="email",
                 auto_send_seconds=30, resend_seconds=60):
        self.identifier = identifier
        self.store = store
        self.countdowns = countdowns
        self.purpose = purpose
        self.channel = channel
        self.auto_send_seconds = auto_send_seconds
        self.resend_seconds = resend_seconds
        self.state = OtpState.IDLE

    def resend_wait(self) -> int:
        return self.countdowns.remaining(self.identifier)

    def send(self, automatic=False):
        """Ask the backend for a code unless the countdown is still running."""
        wait = self.resend_wait()
        if wait > 0:
            return False, f"Please wait {wait}s before requesting a new code"

        ok, error = auth_service.request_otp(self.identifier, self.channel)
        if not ok:
            logger.warning(f"OTP request failed: {error}")
            return False, "Failed to send OTP. Please try again."

        seconds = self.auto_send_seconds if automatic else self.resend_seconds
        self.countdowns.start(self.identifier, seconds)
        return True, None

    def submit(self, raw_code) -> OtpOutcome:
        code = normalize_otp_input(raw_code)
        error = validate_otp(code)
        if error:
            self.state = OtpState.IDLE
            return OtpOutcome(self.state, error=error)

        self.state = OtpState.SUBMITTING
        ok, result = auth_service.verify_otp(self.identifier, code, self.purpose, self.channel)
        if not ok:
            logger.info(f"OTP rejected: {result}")
            self.state = OtpState.REJECTED
            return OtpOutcome(self.state, error=INVALID_CODE)

        user, token = result["user"], result["token"]
        self.store.save_session(token, user, result.get("refreshToken"))
        self.countdowns.cancel(self.identifier)
        self.state = OtpState.VERIFIED
        return OtpOutcome(self.state, user=user, redirect_to=route_for_role(user.get("role")))

    def retry(self):
        if self.state == OtpState.REJECTED:
            self.state = OtpState.IDLE
        return self.state
