"""
Role based permission classes for the station terminals.
"""
from rest_framework.permissions import BasePermission

STATION_ROLES = {"reception", "triage", "doctor", "billing", "admin"}
TRIAGE_ROLES = {"triage", "doctor", "admin"}
RECEPTION_ROLES = {"reception", "admin"}


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsStationStaff(BasePermission):
    """Any station operator or administrator."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in STATION_ROLES


class IsReceptionRole(BasePermission):
    """Reception desk or administrator; only they open visits."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in RECEPTION_ROLES


class IsTriageRole(BasePermission):
    """Triage nurses write intake; doctors read it."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in TRIAGE_ROLES
