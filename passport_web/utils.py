import logging
from datetime import datetime
from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger("passport-frontend")


def build_fernet(key):
    """Fernet for the configured session key, or None when no usable key is set."""
    if not key:
        return None
    try:
        return Fernet(key.encode() if isinstance(key, str) else key)
    except (ValueError, TypeError):
        logger.warning("Session encryption key invalid, session values will be stored unencrypted.")
        logger.warning(f"To fix, set PASSPORT_SESSION_KEY={Fernet.generate_key().decode()}")
        return None


def encrypt_value(fernet, value):
    if value is None or fernet is None:
        return value
    return fernet.encrypt(value.encode()).decode()


def decrypt_value(fernet, value):
    """Decrypt a session value; returns None when it cannot be decrypted."""
    if not value or fernet is None:
        return value
    try:
        return fernet.decrypt(value.encode()).decode()
    except InvalidToken:
        return None


def calculate_age(birthdate_str):
    if not birthdate_str:
        return None
    try:
        b = datetime.strptime(birthdate_str[:10], "%Y-%m-%d")
        t = datetime.today()
        return t.year - b.year - ((t.month, t.day) < (b.month, b.day))
    except (TypeError, ValueError):
        return None
