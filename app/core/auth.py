"""
Caller identity for admin endpoints.

Authentication happens upstream (gateway / session layer). By the time a
request reaches this service the admin identity has already been validated
and is forwarded in trusted headers. This module only reads it.
"""

from typing import Optional

from fastapi import Header, HTTPException, status
from pydantic import BaseModel, Field


class AdminIdentity(BaseModel):
    """Already-authenticated administrator performing an action."""
    id: str = Field(..., min_length=1, description="Admin identifier")
    email: Optional[str] = Field(None, description="Admin email")
    role: str = Field(default="admin", description="admin | super_admin")


def get_current_admin(
    x_admin_id: Optional[str] = Header(None),
    x_admin_email: Optional[str] = Header(None),
    x_admin_role: Optional[str] = Header(None),
) -> AdminIdentity:
    if not x_admin_id or not x_admin_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin identity missing"
        )
    return AdminIdentity(
        id=x_admin_id.strip(),
        email=x_admin_email,
        role=x_admin_role or "admin",
    )
