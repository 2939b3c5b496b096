from __future__ import annotations

from pydantic import BaseModel

APPROVER_ROLES = frozenset({"hr", "manager", "admin"})


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    user_id: int | None = None
    role: str = "employee"

    @property
    def can_approve(self) -> bool:
        return self.role in APPROVER_ROLES
