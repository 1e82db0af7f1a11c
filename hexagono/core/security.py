# hexagono/core/security.py
from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from hexagono.core.errors import UnauthorizedAccess
from hexagono.core.logging_config import logger
from hexagono.core.settings import settings

security = HTTPBasic(realm="Admin", auto_error=False)


@dataclass(frozen=True)
class AdminIdentity:
    username: str
    auth_method: str = "basic"


def _unauthorized(operation: str, scheme: str) -> UnauthorizedAccess:
    exc = UnauthorizedAccess(context={"operation": operation})
    exc.headers = {"WWW-Authenticate": scheme}
    return exc


def require_admin(
    credentials: Optional[HTTPBasicCredentials] = Depends(security),
) -> AdminIdentity:
    """HTTP Basic contra ADMIN_USERNAME/ADMIN_PASSWORD. Sin credenciales configuradas no entra nadie."""
    if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
        logger.warning("admin_auth_not_configured")
        raise _unauthorized("admin_auth", 'Basic realm="Admin"')
    if credentials is None:
        raise _unauthorized("admin_auth", 'Basic realm="Admin"')

    ok_user = secrets.compare_digest(
        credentials.username.encode("utf-8"), settings.ADMIN_USERNAME.encode("utf-8")
    )
    ok_pass = secrets.compare_digest(
        credentials.password.encode("utf-8"), settings.ADMIN_PASSWORD.encode("utf-8")
    )
    if not (ok_user and ok_pass):
        raise _unauthorized("admin_auth", 'Basic realm="Admin"')

    return AdminIdentity(username=credentials.username)


def require_cron_secret(request: Request) -> None:
    """`Authorization: Bearer <CRON_SECRET>`; sin CRON_SECRET configurado se rechaza todo."""
    expected = settings.CRON_SECRET
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if (
        not expected
        or scheme.lower() != "bearer"
        or not secrets.compare_digest(token.strip().encode("utf-8"), expected.encode("utf-8"))
    ):
        raise _unauthorized("cron_auth", "Bearer")
