import json

import requests

from conftest import make_response, posted_paths

OTP_USER = {"_id": "d1", "name": "Dr. Who", "email": "a@b.com", "role": "doctor"}


def _pending(client, **overrides):
    pending = {"email": "a@b.com", "user_type": "patient", "purpose": "login", "auto_sent": True}
    pending.update(overrides)
    with client.session_transaction() as sess:
        sess["otp_pending"] = pending


def test_short_password_blocked_locally(client, mock_api):
    """Short password never reaches the backend"""
    res = client.post("/login", data={"nationalId": "X", "password": "short"})
    assert res.status_code == 200
    assert b"Password must be at least 6 characters" in res.data
    mock_api["post"].assert_not_called()


def test_missing_fields(client, mock_api):
    res = client.post("/login", data={"identifier": "", "password": ""})
    assert b"National ID or email is required" in res.data
    assert b"Password is required" in res.data
    mock_api["post"].assert_not_called()


def test_login_requires_otp(client, mock_api):
    mock_api["post"].return_value = make_response(200, {"success": True, "requiresOTP": True, "email": "a@b.com"})
    res = client.post("/login", data={"identifier": "1199080012345678", "password": "secret1"})
    assert res.status_code == 302
    assert res.headers["Location"].endswith("/otp")
    with client.session_transaction() as sess:
        assert sess["otp_pending"]["email"] == "a@b.com"
        assert sess["otp_pending"]["user_type"] == "patient"
        assert "token" not in sess

    kwargs = mock_api["post"].call_args.kwargs
    assert kwargs["json"]["nationalId"] == "1199080012345678"
    assert kwargs["json"]["password"] == "secret1"


def test_login_immediate_success_writes_session(client, mock_api):
    user = {"_id": "p1", "name": "Jane", "role": "patient"}
    mock_api["post"].return_value = make_response(200, {"success": True, "data": {"user": user, "token": "tok"}})
    res = client.post("/login", data={"identifier": "jane@example.com", "password": "secret1"})
    assert res.status_code == 302
    assert res.headers["Location"].endswith("/patient-passport")
    with client.session_transaction() as sess:
        assert sess["token"] == "tok"
        assert json.loads(sess["user"]) == user
    assert mock_api["post"].call_args.kwargs["json"]["email"] == "jane@example.com"


def test_login_failure_clears_stale_session(client, mock_api, signed_in):
    """Switching from a doctor session to a failed patient login drops the doctor keys"""
    signed_in(role="doctor")
    with client.session_transaction() as sess:
        sess["hospitalAuth"] = json.dumps({"token": "h"})
        sess["refreshToken"] = "r"
    mock_api["post"].return_value = make_response(401, {"success": False, "message": "Invalid credentials"})

    res = client.post("/login", data={"identifier": "1199", "password": "wrongpass"})
    assert res.status_code == 200
    assert b"Invalid credentials" in res.data
    with client.session_transaction() as sess:
        for key in ("token", "user", "hospitalAuth", "refreshToken"):
            assert key not in sess


def test_login_network_error(client, mock_api):
    mock_api["post"].side_effect = requests.ConnectionError("down")
    res = client.post("/doctor/login", data={"identifier": "doc@example.com", "password": "secret1"})
    assert b"Network error" in res.data


def test_login_server_error(client, mock_api):
    mock_api["post"].return_value = make_response(500, {"success": False})
    res = client.post("/login", data={"identifier": "1199", "password": "secret1"})
    assert b"try again later" in res.data


def test_hospital_login_writes_marker(client, mock_api):
    hospital = {"_id": "h1", "name": "KFH", "role": "hospital"}
    mock_api["post"].return_value = make_response(200, {"success": True, "data": {"user": hospital, "token": "h-tok"}})
    res = client.post("/hospital/login", data={"identifier": "kfh@example.com", "password": "secret1"})
    assert res.headers["Location"].endswith("/hospital-dashboard")
    with client.session_transaction() as sess:
        assert json.loads(sess["hospitalAuth"]) == {"token": "h-tok", "hospital": hospital}


def test_otp_page_requires_pending_state(client, mock_api):
    res = client.get("/otp")
    assert res.status_code == 302
    assert res.headers["Location"].endswith("/")
    mock_api["post"].assert_not_called()


def test_otp_page_sends_code_once(client, mock_api):
    _pending(client, auto_sent=False)
    res = client.get("/otp")
    assert res.status_code == 200
    assert b"Resend code in 30s" in res.data
    assert posted_paths(mock_api["post"]) == ["/auth/request-otp"]
    assert mock_api["post"].call_args.kwargs["json"] == {"identifier": "a@b.com", "type": "email"}

    client.get("/otp")
    assert mock_api["post"].call_count == 1


def test_resend_blocked_while_counting_down(client, mock_api):
    _pending(client, auto_sent=False)
    client.get("/otp")
    res = client.post("/otp/resend", follow_redirects=True)
    assert b"Please wait" in res.data
    assert mock_api["post"].call_count == 1


def test_resend_after_countdown(client, mock_api):
    _pending(client)
    res = client.post("/otp/resend", follow_redirects=True)
    assert b"Resend code in 60s" in res.data
    assert posted_paths(mock_api["post"]) == ["/auth/request-otp"]


def test_verify_rejects_malformed_code_locally(client, mock_api):
    _pending(client)
    res = client.post("/otp/verify", data={"otp_code": "12a"})
    assert b"OTP code must be 6 digits" in res.data
    mock_api["post"].assert_not_called()


def test_verify_wrong_code(client, mock_api):
    _pending(client)
    mock_api["post"].return_value = make_response(400, {"success": False, "message": "Invalid OTP"})
    res = client.post("/otp/verify", data={"otp_code": "000000"})
    assert res.status_code == 200
    assert b"Invalid OTP code. Please try again." in res.data
    assert b"http-equiv" not in res.data
    with client.session_transaction() as sess:
        assert "token" not in sess
        assert "user" not in sess
        assert "otp_pending" in sess


def test_verify_success_redirects_doctor(client, mock_api):
    _pending(client, user_type="doctor")
    mock_api["post"].return_value = make_response(200, {"success": True, "data": {"user": OTP_USER, "token": "tok"}})
    res = client.post("/otp/verify", data={"otp_code": "123456"})
    assert res.status_code == 200
    assert b'content="2;url=/doctor-dashboard"' in res.data
    assert posted_paths(mock_api["post"]) == ["/auth/verify-otp"]
    assert mock_api["post"].call_args.kwargs["json"] == {"identifier": "a@b.com", "otpCode": "123456", "type": "email"}
    with client.session_transaction() as sess:
        assert sess["token"] == "tok"
        assert json.loads(sess["user"])["role"] == "doctor"
        assert "otp_pending" not in sess


def test_register_then_verify(client, mock_api):
    mock_api["post"].return_value = make_response(201, {"success": True, "data": {"email": "jane@example.com"}})
    res = client.post("/register", data={
        "name": "Jane Doe", "email": "jane@example.com", "nationalId": "1199",
        "password": "secret1", "confirmPassword": "secret1",
    })
    assert res.headers["Location"].endswith("/otp")
    body = mock_api["post"].call_args.kwargs["json"]
    assert body["role"] == "patient"
    assert "confirmPassword" not in body

    user = {"_id": "p1", "name": "Jane Doe", "role": "patient"}
    mock_api["post"].return_value = make_response(200, {"success": True, "data": {"user": user, "token": "tok"}})
    res = client.post("/otp/verify", data={"otp_code": "654321"})
    assert b"url=/patient-passport" in res.data
    assert posted_paths(mock_api["post"])[-1] == "/auth/verify-registration-otp"
    assert mock_api["post"].call_args.kwargs["json"] == {"email": "jane@example.com", "otpCode": "654321"}


def test_register_validation(client, mock_api):
    res = client.post("/hospital/register", data={"name": "", "email": "bad", "password": "123"})
    assert b"Name is required" in res.data
    assert b"Password must be at least 6 characters" in res.data
    mock_api["post"].assert_not_called()


def test_verify_email_without_token(client, mock_api):
    res = client.get("/verify-email")
    assert b"No verification token provided" in res.data
    mock_api["get"].assert_not_called()


def test_verify_email(client, mock_api):
    mock_api["get"].return_value = make_response(200, {"success": True, "message": "Email verified successfully!"})
    res = client.get("/verify-email?token=abc")
    assert b"Email verified successfully!" in res.data
    assert mock_api["get"].call_args.kwargs["params"] == {"token": "abc"}


def test_resend_verification(client, mock_api):
    res = client.post("/resend-verification", data={"email": "jane@example.com"})
    assert b"Verification link sent" in res.data
    assert posted_paths(mock_api["post"]) == ["/auth/resend-verification"]


def test_logout_clears_session(client, mock_api, signed_in):
    signed_in()
    res = client.get("/logout")
    assert res.headers["Location"].endswith("/login")
    assert posted_paths(mock_api["post"]) == ["/auth/logout"]
    assert mock_api["post"].call_args.kwargs["headers"]["Authorization"] == "Bearer tok-123"
    with client.session_transaction() as sess:
        assert "token" not in sess


def _seed_hospital_session(client):
    hospital = {"_id": "h1", "name": "KFH", "role": "hospital"}
    with client.session_transaction() as sess:
        sess["token"] = "h-tok"
        sess["user"] = json.dumps(hospital)
        sess["hospitalAuth"] = json.dumps({"token": "h-tok", "hospital": hospital})
        sess["refreshToken"] = "h-ref"


def test_patient_login_after_hospital_session_uses_own_token(client, mock_api):
    _seed_hospital_session(client)
    user = {"_id": "p1", "name": "Jane", "role": "patient"}
    mock_api["post"].return_value = make_response(200, {"success": True, "data": {"user": user, "token": "p-tok"}})
    client.post("/login", data={"identifier": "jane@example.com", "password": "secret1"})

    with client.session_transaction() as sess:
        assert "hospitalAuth" not in sess
        assert "refreshToken" not in sess
        assert sess["token"] == "p-tok"

    client.get("/doctor-dashboard")
    assert mock_api["get"].call_args.kwargs["headers"]["Authorization"] == "Bearer p-tok"


def test_otp_login_after_hospital_session_uses_own_token(client, mock_api):
    _seed_hospital_session(client)
    _pending(client, user_type="doctor")
    mock_api["post"].return_value = make_response(200, {"success": True, "data": {"user": OTP_USER, "token": "d-tok"}})
    client.post("/otp/verify", data={"otp_code": "123456"})

    with client.session_transaction() as sess:
        assert "hospitalAuth" not in sess
        assert "refreshToken" not in sess

    client.get("/doctor-dashboard")
    assert mock_api["get"].call_args.kwargs["headers"]["Authorization"] == "Bearer d-tok"


def test_register_shows_server_message(client, mock_api):
    mock_api["post"].return_value = make_response(400, {"success": False, "message": "User with this email already exists"})
    res = client.post("/register", data={
        "name": "Jane Doe", "email": "jane@example.com", "nationalId": "1199",
        "password": "secret1", "confirmPassword": "secret1",
    })
    assert res.status_code == 200
    assert b"User with this email already exists" in res.data
    assert b"check your input" not in res.data


def test_login_with_non_object_body(client, mock_api, signed_in):
    signed_in()
    mock_api["post"].return_value = make_response(200, ["unexpected"])
    res = client.post("/login", data={"identifier": "1199", "password": "secret1"})
    assert res.status_code == 200
    assert b"Unexpected API response" in res.data
    with client.session_transaction() as sess:
        assert "token" not in sess
