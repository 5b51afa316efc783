"""Caller identity as resolved by the authentication layer.

Credentials never reach the services: views turn the authenticated user
into a ``Caller`` (user id + role) and pass that down.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from django.db import models


class Role(models.TextChoices):
    USER = "user", "User"
    ADMIN = "admin", "Admin"


@dataclass(frozen=True)
class Caller:
    user_id: int
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_user(cls, user: Any) -> Caller:
        """Staff users act as admins; everyone else is a regular user."""
        role = Role.ADMIN if getattr(user, "is_staff", False) else Role.USER
        return cls(user_id=user.pk, role=role)
