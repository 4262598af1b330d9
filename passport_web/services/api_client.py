import requests
import logging
from flask import current_app

# Logging
logger = logging.getLogger("passport-frontend")

NETWORK_ERROR = "Network error. Please check your connection and try again."

STATUS_MESSAGES = {
    0: NETWORK_ERROR,
    400: "Please check your input and try again.",
    401: "Invalid credentials. Please check your email/national ID and password.",
    500: "Server error. Please try again later.",
}


def api_url(path: str) -> str:
    """Build full API URL for a given path."""
    if path.startswith("http"):
        return path
    if not path.startswith("/"):
        path = "/" + path
    api_base = current_app.config["PASSPORT_API_BASE"].rstrip("/")
    return f"{api_base}{path}"


def describe_status(status: int):
    """User-facing text for a transport failure, or None when the status has no fixed wording."""
    if status >= 500:
        return STATUS_MESSAGES[500]
    return STATUS_MESSAGES.get(status)


def response_status(response) -> int:
    return response.status_code if response is not None else 0


def _headers(token=None):
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def handle_api_response(response):
    """Handle API responses consistently.

    Returns ``(True, body)`` for a 2xx JSON body not flagged ``success: false``,
    otherwise ``(False, message)``.
    """
    if response is None:
        return False, NETWORK_ERROR

    try:
        data = response.json()
    except ValueError as e:
        logger.error(f"API response parsing failed: {e}. Status: {response.status_code}, URL: {response.url}, Content-Type: {response.headers.get('Content-Type')}")
        msg = describe_status(response.status_code) or f"Unexpected API response (Status {response.status_code})"
        if "text/html" in response.headers.get("Content-Type", ""):
            msg += " The server returned HTML instead of JSON."
        return False, msg

    if not isinstance(data, dict):
        logger.error(f"API response body is not an object. Status: {response.status_code}, URL: {response.url}")
        return False, describe_status(response.status_code) or f"Unexpected API response (Status {response.status_code})"

    if 200 <= response.status_code < 300 and data.get("success", True) is not False:
        return True, data

    error_msg = data.get("message") or data.get("error") or describe_status(response.status_code)
    return False, error_msg or f"API error: {response.status_code}"


def safe_get(path: str, params: dict = None, token: str = None, timeout: int = None):
    try:
        url = api_url(path)
        logger.info(f"API GET: {url}")
        r = requests.get(url, params=params or {}, headers=_headers(token),
                         timeout=timeout or current_app.config["API_TIMEOUT_GET"])
        return r
    except requests.RequestException as e:
        logger.error(f"API GET failed: {e}")
        return None


def safe_post(path: str, json: dict = None, token: str = None, timeout: int = None):
    try:
        url = api_url(path)
        logger.info(f"API POST: {url}")
        r = requests.post(url, json=json, headers=_headers(token),
                          timeout=timeout or current_app.config["API_TIMEOUT_POST"])
        return r
    except requests.RequestException as e:
        logger.error(f"API POST failed: {e}")
        return None
