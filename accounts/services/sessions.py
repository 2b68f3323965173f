"""
Session issuance and verification on top of django.contrib.sessions.

Django keeps the session row and cookie; we stamp the time the session was
issued and refuse it once SESSION_LIFETIME has passed, independent of the
cookie's own max-age.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from functools import wraps

from django.conf import settings
from django.contrib.auth import login, logout
from django.http import JsonResponse
from django.utils import timezone

logger = logging.getLogger(__name__)

ISSUED_AT_KEY = "issued_at"

VALID = "VALID"
EXPIRED = "EXPIRED"
INVALID = "INVALID"


@dataclass
class SessionStatus:
    info: str = INVALID
    valid: bool = False
    user_id: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def _now_ts() -> float:
    return timezone.now().timestamp()


def issue_session(request, user) -> None:
    """
    Log `user` in on this request. A session that already belongs to the
    same user is kept and only its issue time is refreshed.
    """
    if request.user.is_authenticated and request.user.pk == user.pk:
        request.session[ISSUED_AT_KEY] = _now_ts()
        return
    login(request, user, backend="django.contrib.auth.backends.ModelBackend")
    request.session[ISSUED_AT_KEY] = _now_ts()
    logger.info("Session issued for user id=%s.", user.pk)


def verify_session(request) -> SessionStatus:
    if not request.user.is_authenticated:
        return SessionStatus()

    issued_at = request.session.get(ISSUED_AT_KEY)
    if issued_at is None:
        # Logged in through a path that did not stamp the session (admin,
        # django.contrib.auth views); start the clock now.
        issued_at = _now_ts()
        request.session[ISSUED_AT_KEY] = issued_at

    lifetime = settings.SESSION_LIFETIME.total_seconds()
    if _now_ts() - float(issued_at) > lifetime:
        logger.info("Session expired for user id=%s.", request.user.pk)
        end_session(request)
        return SessionStatus(info=EXPIRED)

    return SessionStatus(info=VALID, valid=True, user_id=request.user.pk)


def end_session(request) -> None:
    logout(request)


def session_required(view_func):
    """JSON counterpart of login_required: 401 with the session status."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        status = verify_session(request)
        if not status.valid:
            payload = status.as_dict()
            payload["success"] = False
            return JsonResponse(payload, status=401)
        return view_func(request, *args, **kwargs)

    return _wrapped
