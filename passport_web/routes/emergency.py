import logging
from flask import Blueprint, render_template, request, redirect, flash, g, current_app

from passport_web.routes.common import login_required, session_expired
from passport_web.routing import route_for_role
from passport_web.services.data_service import fetch_hospitals
from passport_web.services.emergency_service import request_emergency_override, fetch_emergency_history
from passport_web.validation import validate_emergency_request

logger = logging.getLogger("passport-frontend")
emergency_bp = Blueprint('emergency', __name__)


@emergency_bp.route("/patients/<patient_id>/emergency-override", methods=["GET", "POST"], endpoint="emergency_override")
@login_required
def emergency_override(patient_id):
    token = g.session_store.bearer_token()
    patient_name = request.values.get("patient_name", "")
    justification = ""
    acknowledged = False
    error = None

    if request.method == "POST":
        justification = request.form.get("justification", "")
        acknowledged = request.form.get("acknowledged") in ("on", "true", "1", "yes")
        hospital_id = request.form.get("hospital_id") or None
        error = validate_emergency_request(justification, acknowledged,
                                           current_app.config["MIN_JUSTIFICATION_LENGTH"])
        if not error:
            logger.info(f"Submitting emergency access request for patient {patient_id}")
            status, success, result = request_emergency_override(patient_id, justification, token, hospital_id)
            if status == 401:
                return session_expired()
            if success:
                flash("Emergency access granted. This access is logged and will be audited.", "success")
                user = g.session_store.get_user() or {}
                return redirect(route_for_role(user.get("role")))
            error = result

    _, hospitals = fetch_hospitals(token)
    return render_template("emergency_override.html", patient_id=patient_id, patient_name=patient_name,
                           hospitals=hospitals, justification=justification,
                           acknowledged=acknowledged, error=error)


@emergency_bp.route("/emergency-access/history", endpoint="emergency_history")
@login_required
def emergency_history():
    status, records = fetch_emergency_history(g.session_store.bearer_token())
    if status == 401:
        return session_expired()
    return render_template("emergency_history.html", records=records)
