from passport_web.services.api_client import safe_get, safe_post, handle_api_response, response_status


def request_emergency_override(patient_id, justification, token, hospital_id=None):
    """Submit an emergency-access request. The backend grants or denies and keeps the audit trail.

    Returns ``(status, success, data_or_message)``.
    """
    payload = {"patientId": patient_id, "justification": justification.strip()}
    if hospital_id:
        payload["hospitalId"] = hospital_id
    resp = safe_post("/medical/emergency-override", json=payload, token=token)
    success, result = handle_api_response(resp)
    return response_status(resp), success, result


def fetch_emergency_history(token):
    resp = safe_get("/emergency-access/my-history", token=token)
    success, data = handle_api_response(resp)
    if not success:
        return response_status(resp), []
    records = data.get("data", data)
    return response_status(resp), records if isinstance(records, list) else []
