import logging

from django.conf import settings
from rest_framework.permissions import BasePermission

logger = logging.getLogger(__name__)


class AllowedIPPermission(BasePermission):
    """
    Admits requests whose REMOTE_ADDR equals an entry of POINT_FEED_ALLOWED_IPS
    or starts with it (entries such as "192.168.1." act as prefixes).
    """
    message = "Access denied"

    def has_permission(self, request, view):
        client_ip = request.META.get('REMOTE_ADDR', '')
        allowed = getattr(settings, 'POINT_FEED_ALLOWED_IPS', [])

        if any(client_ip == entry or (entry and client_ip.startswith(entry)) for entry in allowed):
            return True

        logger.warning(f"Rejected point feed request from {client_ip or 'unknown address'}")
        return False
