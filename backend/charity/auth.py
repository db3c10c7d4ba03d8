"""
Request identity.

Tokens are verified by the gateway in front of this service, which forwards
the authenticated user as X-User-Id / X-User-Role headers.
"""
import hmac
import os
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException

from .errors import AccessDenied


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: str = 'user'

    @property
    def is_admin(self):
        return self.role == 'admin'


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Identity:
    if not x_user_id:
        raise HTTPException(status_code=401, detail='Access denied')
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail='Invalid identity')
    return Identity(user_id=user_id, role=(x_user_role or 'user').lower())


def require_admin(identity: Identity = Depends(get_current_user)) -> Identity:
    if not identity.is_admin:
        raise AccessDenied('Admin access required')
    return identity


def verify_webhook_key(x_webhook_key: Optional[str] = Header(None)):
    # Shared secret check, only enforced when PAYMENT_WEBHOOK_KEY is set.
    expected = os.getenv('PAYMENT_WEBHOOK_KEY')
    if expected and not hmac.compare_digest(x_webhook_key or '', expected):
        raise HTTPException(status_code=401, detail='Unauthorized')
