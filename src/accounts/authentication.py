import logging

from rest_framework.authentication import SessionAuthentication
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

logger = logging.getLogger(__name__)


class OptionalJWTAuthentication(JWTAuthentication):
    """Bearer auth for public endpoints: a bad or expired token means anonymous."""

    def authenticate(self, request):
        try:
            return super().authenticate(request)
        except AuthenticationFailed as exc:
            logger.debug("Ignoring invalid bearer token on %s: %s", request.path, exc)
            return None


OPTIONAL_AUTHENTICATION = [OptionalJWTAuthentication, SessionAuthentication]
