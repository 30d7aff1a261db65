from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from ..config import settings

logger = logging.getLogger(__name__)

SESSION_COOKIE = "hours_portal_session"


class AuthConfigError(Exception):
    pass


@dataclass(frozen=True)
class AdminAccount:
    email: str
    password: str


@dataclass(frozen=True)
class AdminSession:
    email: str
    expires_at: datetime


def parse_admin_accounts(raw: Optional[str]) -> List[AdminAccount]:
    """Parse ``email1:password1,email2:password2``; malformed pairs are skipped."""
    accounts: List[AdminAccount] = []
    if not raw:
        return accounts
    for chunk in raw.split(","):
        email, _, password = chunk.strip().partition(":")
        email, password = email.strip(), password.strip()
        if email and password:
            accounts.append(AdminAccount(email=email, password=password))
    return accounts


def configured_accounts() -> List[AdminAccount]:
    accounts = parse_admin_accounts(settings.admin_accounts)
    if settings.admin_email and settings.admin_password:
        accounts.append(AdminAccount(email=settings.admin_email, password=settings.admin_password))
    return accounts


def _session_secret() -> bytes:
    secret = settings.resolved_session_secret()
    if not secret:
        raise AuthConfigError("SESSION_SECRET must be set in production")
    return secret.encode("utf-8")


def authenticate(email: str, password: str) -> Optional[AdminSession]:
    accounts = configured_accounts()
    if not accounts:
        raise AuthConfigError("Admin credentials not configured. Set ADMIN_ACCOUNTS or ADMIN_EMAIL/ADMIN_PASSWORD")

    matched = None
    for account in accounts:
        email_ok = hmac.compare_digest(account.email.encode("utf-8"), email.encode("utf-8"))
        password_ok = hmac.compare_digest(account.password.encode("utf-8"), password.encode("utf-8"))
        if email_ok and password_ok and matched is None:
            matched = account
    if matched is None:
        logger.info("Rejected admin login for %s", email)
        return None

    expires_at = datetime.now(timezone.utc) + timedelta(hours=settings.session_ttl_hours)
    return AdminSession(email=matched.email, expires_at=expires_at.replace(microsecond=0))


def _sign(value: str) -> str:
    return hmac.new(_session_secret(), value.encode("utf-8"), hashlib.sha256).hexdigest()


def issue_token(session: AdminSession) -> str:
    payload = f"{session.email}|{int(session.expires_at.timestamp())}"
    encoded = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")
    return f"{encoded}.{_sign(encoded)}"


def _decode(token: str) -> Optional[Tuple[str, int]]:
    # issued tokens are always ASCII
    if not token or not token.isascii() or "." not in token:
        return None
    encoded, digest = token.rsplit(".", 1)
    if not hmac.compare_digest(digest, _sign(encoded)):
        return None
    try:
        payload = base64.urlsafe_b64decode(encoded.encode("ascii")).decode("utf-8")
        email, _, expiry = payload.rpartition("|")
        return email, int(expiry)
    except (ValueError, UnicodeDecodeError):
        return None


def verify_token(token: Optional[str], *, now: Optional[datetime] = None) -> Optional[AdminSession]:
    decoded = _decode(token or "")
    if decoded is None:
        return None
    email, expiry = decoded
    expires_at = datetime.fromtimestamp(expiry, tz=timezone.utc)
    if (now or datetime.now(timezone.utc)) >= expires_at:
        return None
    if email not in {account.email for account in configured_accounts()}:
        return None
    return AdminSession(email=email, expires_at=expires_at)
