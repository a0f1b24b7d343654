"""Caller identity, as asserted by the upstream authentication layer.

The gateway in front of this service authenticates the user and forwards
``X-User-Id`` and ``X-User-Role``. Requests without a user id are rejected.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException

ADMIN_ROLE = "admin"
CUSTOMER_ROLE = "customer"


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: str = CUSTOMER_ROLE

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def current_identity(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Identity:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    role = (x_user_role or CUSTOMER_ROLE).strip().lower()
    return Identity(user_id=x_user_id.strip(), role=role)


def require_admin(identity: Identity = Depends(current_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return identity
