import secrets

from django.conf import settings
from rest_framework import permissions

from movielog.exceptions import AuthError

CREDENTIAL_HEADER = "X-Admin-Credential"


class HasAdminCredential(permissions.BasePermission):
    """
    Read: everyone
    Write: only requests carrying the shared admin credential
    """

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True

        expected = settings.ADMIN_CREDENTIAL
        supplied = request.headers.get(CREDENTIAL_HEADER, "")
        if not expected or not secrets.compare_digest(
            supplied.encode(), expected.encode()
        ):
            raise AuthError()
        return True
