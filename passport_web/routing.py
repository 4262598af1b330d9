"""Where each role lands after signing in."""

DEFAULT_ROUTE = "/patient-passport"

ROLE_ROUTES = {
    "patient": "/patient-passport",
    "hospital": "/hospital-dashboard",
    "doctor": "/doctor-dashboard",
    "receptionist": "/receptionist-dashboard",
    "admin": "/admin-dashboard",
}

LOGIN_ROUTES = {
    "patient": "/login",
    "doctor": "/doctor/login",
    "hospital": "/hospital/login",
}


def route_for_role(role) -> str:
    """Destination for a user role; unknown roles get the patient passport."""
    if not isinstance(role, str):
        return DEFAULT_ROUTE
    return ROLE_ROUTES.get(role, DEFAULT_ROUTE)


def login_route_for(user_type) -> str:
    return LOGIN_ROUTES.get(user_type, LOGIN_ROUTES["patient"])
