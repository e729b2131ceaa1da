from rest_framework.permissions import BasePermission


def is_admin_user(user) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return bool(getattr(user, "is_admin", False) or getattr(user, "is_superuser", False))


class IsAdmin(BasePermission):
    message = "Only administrators can perform this action"

    def has_permission(self, request, view):
        return is_admin_user(request.user)


class IsOwnerOrAdmin(BasePermission):
    message = "You can only modify your own listings or you must be an admin!"

    def has_object_permission(self, request, view, obj):
        user = request.user
        if not getattr(user, "is_authenticated", False):
            return False
        return obj.user_ref_id == getattr(user, "id", None) or is_admin_user(user)


class IsSelfOrAdmin(BasePermission):
    message = "You can only view your own account data"

    def has_object_permission(self, request, view, obj):
        user = request.user
        if not getattr(user, "is_authenticated", False):
            return False
        return obj.pk == getattr(user, "id", None) or is_admin_user(user)
