from rest_framework.permissions import BasePermission

SAFE_METHODS = ["GET", "HEAD", "OPTIONS"]

# Operations a member may run on their own records.
SELF_SERVICE_OPERATIONS = ["view_balance", "view_payments", "view_credits"]


def has_operation_permission(user, operation, member=None):
    """
    Authorization check consulted by the allocation engine before any work.
    System admins may run every operation; members only read their own data.
    ``member`` may be a user or a primary key.
    """
    if user is None or not user.is_authenticated:
        return False
    if user.is_superuser or user.is_system_admin:
        return True
    return (
        operation in SELF_SERVICE_OPERATIONS
        and member is not None
        and str(getattr(member, "pk", member)) == str(user.pk)
    )


class IsSystemAdmin(BasePermission):
    def has_permission(self, request, view):
        return (
            request.user.is_authenticated
            and request.user.is_system_admin
            or request.user.is_superuser
        )


class IsSystemAdminOrReadOnly(BasePermission):
    def has_permission(self, request, view):
        return (
            request.method in SAFE_METHODS
            and request.user.is_authenticated
            or request.user.is_authenticated
            and request.user.is_system_admin
            or request.user.is_superuser
        )

    def has_object_permission(self, request, view, obj):
        return (
            request.method in SAFE_METHODS
            and request.user.is_authenticated
            or request.user.is_authenticated
            and request.user.is_system_admin
            or request.user.is_superuser
        )
