"""The authenticated caller, as handed over by the auth layer.

Authentication itself happens elsewhere; this core only checks
ownership and the admin role where an operation demands it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stockroom.domain.exceptions import ForbiddenError


class Role(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: Role = Role.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def require_admin(self) -> None:
        if not self.is_admin:
            raise ForbiddenError(f"User '{self.user_id}' is not an admin")

    def require_owner_or_admin(self, owner_id: str) -> None:
        if not self.is_admin and owner_id != self.user_id:
            raise ForbiddenError(
                f"User '{self.user_id}' may not act on a resource owned by '{owner_id}'"
            )
