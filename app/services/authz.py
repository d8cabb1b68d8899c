# app/services/authz.py
# ── Jerarquía de roles: viewer < editor < admin
from __future__ import annotations

from typing import Literal, Optional

UserRole = Literal["viewer", "editor", "admin"]

ROLE_RANK: dict[str, int] = {
    "viewer": 1,
    "editor": 2,
    "admin": 3,
}


def has_role(user_role: Optional[str], required_role: str) -> bool:
    """
    True si `user_role` alcanza o supera `required_role`.
    Roles desconocidos o None nunca pasan.
    """
    if user_role not in ROLE_RANK:
        return False
    return ROLE_RANK[user_role] >= ROLE_RANK[required_role]


def can_edit(role: Optional[str]) -> bool:
    return role in ("editor", "admin")


def is_admin(role: Optional[str]) -> bool:
    return role == "admin"
