from __future__ import annotations

from .exceptions import AuthenticationFailed
from .models import ApiToken

BEARER_PREFIX = "Bearer "


def authenticate(request):
    """Return the user owning the request's bearer token."""
    header = request.headers.get("Authorization", "")
    if not header.startswith(BEARER_PREFIX):
        raise AuthenticationFailed("Missing bearer token.")
    key = header[len(BEARER_PREFIX):].strip()
    token = ApiToken.objects.select_related("user").filter(key=key).first()
    if token is None or not token.user.is_active:
        raise AuthenticationFailed("Invalid bearer token.")
    return token.user


def issue_token(user, name: str = "") -> ApiToken:
    return ApiToken.objects.create(user=user, name=name)
