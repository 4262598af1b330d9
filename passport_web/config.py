import os

class Config:
    SECRET_KEY = os.environ.get("PASSPORT_UI_SECRET", "dev-secret-key")
    PASSPORT_API_BASE = os.environ.get("PASSPORT_API_BASE", "http://127.0.0.1:5000/api")

    API_TIMEOUT_GET = int(os.environ.get("PASSPORT_API_TIMEOUT_GET", 10))
    API_TIMEOUT_POST = int(os.environ.get("PASSPORT_API_TIMEOUT_POST", 30))

    # Optional Fernet key; when set, session values are encrypted inside the signed cookie
    SESSION_ENCRYPTION_KEY = os.environ.get("PASSPORT_SESSION_KEY")

    # Resend windows (seconds). The automatic send on entering the OTP screen
    # and the manual resend button use different windows.
    OTP_AUTO_SEND_COUNTDOWN = int(os.environ.get("PASSPORT_OTP_AUTO_SEND_COUNTDOWN", 30))
    OTP_RESEND_COUNTDOWN = int(os.environ.get("PASSPORT_OTP_RESEND_COUNTDOWN", 60))
    OTP_REDIRECT_DELAY = int(os.environ.get("PASSPORT_OTP_REDIRECT_DELAY", 2))

    MIN_PASSWORD_LENGTH = 6
    MIN_JUSTIFICATION_LENGTH = 20


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test_secret"
    PASSPORT_API_BASE = "http://backend.test/api"
    SESSION_ENCRYPTION_KEY = None
