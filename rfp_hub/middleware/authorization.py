from typing import Optional

from fastapi import Depends, HTTPException, status

from rfp_hub.middleware.auth import get_current_user

CUSTOMER_ROLES = ("CUSTOMER", "ADMIN")
SUPPLIER_ROLES = ("SUPPLIER", "ADMIN")


def require_roles(*allowed_roles: str):
    """
    FastAPI dependency factory for role-based access control.

    Usage:
        @router.get("/projects")
        async def list_projects(
            current_user: dict = Depends(get_current_user),
            _auth: None = Depends(require_roles("CUSTOMER", "ADMIN")),
        ):
    """
    async def check_role(current_user: dict = Depends(get_current_user)):
        if current_user["role"] not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return None

    return check_role


def owner_scope(current_user: dict) -> Optional[int]:
    """User id to scope owned entities by; None for admins, who see everything."""
    if current_user["role"] == "ADMIN":
        return None
    return current_user["user_id"]
