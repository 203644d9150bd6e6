from rest_framework import permissions


class IsStudent(permissions.BasePermission):
    """Students, plus admins acting on their behalf."""
    message = 'Only students can access this endpoint'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_student or user.is_platform_admin))


class IsInstructor(permissions.BasePermission):
    message = 'Only instructors can access this endpoint'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_instructor or user.is_platform_admin))


class IsAdminRole(permissions.BasePermission):
    message = 'Only administrators can access this endpoint'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_platform_admin)
