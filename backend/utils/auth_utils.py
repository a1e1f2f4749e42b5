from dataclasses import dataclass, field
from typing import Dict, FrozenSet

from fastapi import Depends, HTTPException, status, Request
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

import config

ADMIN_ROLE = "Admin"

# Permission strings carried in the token's "permissions" claim
VIEW_ORDERS = "VIEW_ORDERS"
CREATE_ORDER = "CREATE_ORDER"
EDIT_ORDERS = "EDIT_ORDERS"
DELETE_ORDER = "DELETE_ORDER"
VIEW_INVENTORY = "VIEW_INVENTORY"
EDIT_INVENTORY = "EDIT_INVENTORY"
VIEW_CUSTOMERS = "VIEW_CUSTOMERS"
EDIT_CUSTOMERS = "EDIT_CUSTOMERS"
VIEW_PROVIDERS = "VIEW_PROVIDERS"
EDIT_PROVIDERS = "EDIT_PROVIDERS"
VIEW_PROVIDER_ORDERS = "VIEW_PROVIDER_ORDERS"
MANAGE_PROVIDER_ORDERS = "MANAGE_PROVIDER_ORDERS"


@dataclass(frozen=True)
class Capabilities:
    """What the caller may do, resolved once per request from the token."""

    role: str = ""
    permissions: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def allows(self, permission: str) -> bool:
        # Admin bypasses permission checks
        return self.is_admin or permission in self.permissions


def get_current_user(request: Request) -> Dict[str, any]:
    """
    FastAPI dependency to validate the JWT from the Authorization header.

    Usage:
        @app.get("/secure-data", dependencies=[Depends(get_current_user)])
        def secure_endpoint():
            return {"message": "This is secure data."}
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is missing",
        )

    # The token is expected to be in the format "Bearer <token>"
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    try:
        return jwt.decode(parts[1], config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token validation failed: {e}"
        )


def get_user_identifier(user: dict) -> str:
    """Best human-readable identifier for audit columns."""
    if not user:
        return "system"
    return str(user.get("username") or user.get("email") or user.get("sub") or "unknown")


def get_capabilities(user: dict = Depends(get_current_user)) -> Capabilities:
    return Capabilities(
        role=user.get("role", ""),
        permissions=frozenset(user.get("permissions") or []),
    )


def require_permission(*permissions: str):
    """Dependency factory: the caller must hold every listed permission."""
    def checker(capabilities: Capabilities = Depends(get_capabilities)) -> Capabilities:
        missing = [p for p in permissions if not capabilities.allows(p)]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing required permission(s): {', '.join(missing)}",
            )
        return capabilities
    return checker


def require_role(*roles: str):
    def checker(user: dict = Depends(get_current_user)) -> dict:
        if user.get("role") not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You don't have the permission."
            )
        return user
    return checker
