from flask import Blueprint, render_template, redirect, url_for, g

from passport_web.routes.common import login_required, session_expired
from passport_web.services import auth_service
from passport_web.services.data_service import (
    fetch_hospitals, fetch_patients, fetch_hospital_dashboard,
    fetch_admin_overview, fetch_medical_records
)
from passport_web.utils import calculate_age

dashboard_bp = Blueprint('dashboard', __name__)


def _user_id(user):
    return (user or {}).get("_id") or (user or {}).get("id")


@dashboard_bp.route("/patient-passport", endpoint="patient_passport")
@login_required
def patient_passport():
    user = auth_service.load_current_user(g.session_store)
    if user is None:
        return redirect(url_for("auth.login"))

    status, records = fetch_medical_records(_user_id(user), g.session_store.bearer_token())
    if status == 401:
        return session_expired()
    return render_template("patient_passport.html", user=user, records=records,
                           age=calculate_age(user.get("dateOfBirth")))


@dashboard_bp.route("/doctor-dashboard", endpoint="doctor_dashboard")
@login_required
def doctor_dashboard():
    status, patients = fetch_patients(g.session_store.bearer_token())
    if status == 401:
        return session_expired()
    return render_template("dashboard.html", title="Doctor Dashboard", user=g.session_store.get_user(),
                           patients=patients, emergency_access=True)


@dashboard_bp.route("/hospital-dashboard", endpoint="hospital_dashboard")
@login_required
def hospital_dashboard():
    status, stats = fetch_hospital_dashboard(g.session_store.bearer_token())
    if status == 401:
        return session_expired()
    hospital_auth = g.session_store.get_hospital_auth() or {}
    user = hospital_auth.get("hospital") or g.session_store.get_user()
    return render_template("dashboard.html", title="Hospital Dashboard", user=user,
                           stats=stats, patients=stats.get("patients") or [])


@dashboard_bp.route("/receptionist-dashboard", endpoint="receptionist_dashboard")
@login_required
def receptionist_dashboard():
    status, patients = fetch_patients(g.session_store.bearer_token())
    if status == 401:
        return session_expired()
    return render_template("dashboard.html", title="Receptionist Dashboard", user=g.session_store.get_user(),
                           patients=patients)


@dashboard_bp.route("/admin-dashboard", endpoint="admin_dashboard")
@login_required
def admin_dashboard():
    token = g.session_store.bearer_token()
    status, stats = fetch_admin_overview(token)
    if status == 401:
        return session_expired()
    _, hospitals = fetch_hospitals(token)
    return render_template("dashboard.html", title="Admin Dashboard", user=g.session_store.get_user(),
                           stats=stats, hospitals=hospitals)


@dashboard_bp.route("/patients", endpoint="patient_list")
@login_required
def patient_list():
    status, patients = fetch_patients(g.session_store.bearer_token())
    if status == 401:
        return session_expired()
    user = g.session_store.get_user() or {}
    return render_template("dashboard.html", title="Patients", user=user, patients=patients,
                           emergency_access=user.get("role") == "doctor")


@dashboard_bp.route("/hospitals", endpoint="hospital_list")
@login_required
def hospital_list():
    status, hospitals = fetch_hospitals(g.session_store.bearer_token())
    if status == 401:
        return session_expired()
    return render_template("dashboard.html", title="Hospitals", user=g.session_store.get_user(),
                           hospitals=hospitals)
