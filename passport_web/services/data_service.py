from passport_web.services.api_client import safe_get, handle_api_response, response_status


def _unwrap(data):
    """Backend bodies are either the payload itself or {success, data: payload}."""
    if isinstance(data, dict) and "data" in data:
        return data["data"]
    return data


def _fetch(path, token, params=None):
    resp = safe_get(path, params=params, token=token)
    success, data = handle_api_response(resp)
    return response_status(resp), success, (_unwrap(data) if success else data)


def _fetch_list(path, token, key=None):
    status, success, data = _fetch(path, token)
    if success and isinstance(data, dict) and key:
        data = data.get(key)
    return status, data if success and isinstance(data, list) else []


def fetch_hospitals(token):
    """Fetch list of hospitals."""
    return _fetch_list("/hospitals", token, key="hospitals")


def fetch_patients(token):
    """Fetch list of patients visible to the signed-in user."""
    return _fetch_list("/patients", token, key="patients")


def fetch_hospital_dashboard(token):
    status, success, data = _fetch("/dashboard/hospital", token)
    return status, data if success and isinstance(data, dict) else {}


def fetch_admin_overview(token):
    status, success, data = _fetch("/dashboard/admin/overview", token)
    return status, data if success and isinstance(data, dict) else {}


def fetch_medical_records(patient_id, token):
    if not patient_id:
        return 0, {}
    status, success, data = _fetch(f"/medical-records/patient/{patient_id}", token)
    return status, data if success and isinstance(data, dict) else {}
