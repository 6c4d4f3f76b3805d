# server/tenderscore/permissions.py

from rest_framework import permissions


class IsStaffOrAdmin(permissions.BasePermission):
    """
    Permission class for staff and admin users
    """

    def has_permission(self, request, view):
        return request.user.role in ['staff', 'admin']

    def has_object_permission(self, request, view, obj):
        return request.user.role in ['staff', 'admin']


class IsEvaluator(permissions.BasePermission):
    """
    Permission class for evaluator users
    """

    def has_permission(self, request, view):
        return request.user.role == 'evaluator'

    def has_object_permission(self, request, view, obj):
        return request.user.role == 'evaluator'


class IsEvaluatorOrStaff(permissions.BasePermission):
    """
    Permission class for anyone taking part in an evaluation
    """

    def has_permission(self, request, view):
        return request.user.role in ['evaluator', 'staff', 'admin']

    def has_object_permission(self, request, view, obj):
        return request.user.role in ['evaluator', 'staff', 'admin']


class IsAdminUser(permissions.BasePermission):
    """
    Permission class for admin users only
    """

    def has_permission(self, request, view):
        return request.user.role == 'admin'

    def has_object_permission(self, request, view, obj):
        return request.user.role == 'admin'


class CanManageOwnSubmissions(permissions.BasePermission):
    """
    Permission for vendors to manage their own bid submissions and awards
    """

    def has_object_permission(self, request, view, obj):
        if request.user.role == 'vendor':
            return obj.vendor.users.filter(id=request.user.id).exists()
        return True


class IsAwardedVendor(permissions.BasePermission):
    """
    Permission for the vendor users of an award, who alone may accept or decline it
    """

    def has_permission(self, request, view):
        return request.user.role == 'vendor'

    def has_object_permission(self, request, view, obj):
        return request.user.role == 'vendor' and obj.vendor.users.filter(id=request.user.id).exists()
