from hmac import compare_digest

from rest_framework.permissions import BasePermission
from django.conf import settings

PRINCIPAL_HEADER = 'x-principal'
API_KEY_HEADER = 'x-api-key'


def get_principal(request):
    """The caller identity the gateway already authenticated, or None."""
    principal = request.headers.get(PRINCIPAL_HEADER, '').strip()
    return principal or None


class IsLedgerGateway(BasePermission):
    """
    Allows access only to requests from the trusted gateway: they carry the
    gateway API key and name the principal making the call.

    settings.LEDGER_GATEWAY_API_KEY must be set, or every request is refused.
    """
    message = "A valid gateway API key and X-Principal header are required."

    def has_permission(self, request, view):
        key = request.headers.get(API_KEY_HEADER)
        expected = getattr(settings, 'LEDGER_GATEWAY_API_KEY', None)

        if not key or not expected:
            return False

        # Constant-time comparison
        if not compare_digest(key.encode('utf-8'), expected.encode('utf-8')):
            return False

        return get_principal(request) is not None
