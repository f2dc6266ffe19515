from rest_framework.permissions import BasePermission


class IsNurseryAdmin(BasePermission):
    """
    Admin dashboard endpoints. Admin accounts are staff users.
    """
    message = "Admin access required."

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and request.user.is_staff
        )
