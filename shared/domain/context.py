"""Caller context passed explicitly into every engine operation."""

from dataclasses import dataclass
from enum import Enum

from shared.domain.base import ValueObject


class Role(Enum):
    CUSTOMER = 'customer'
    ADMIN = 'admin'


@dataclass(frozen=True)
class CallerContext(ValueObject):
    """
    Identity of whoever invokes an operation

    Supplied by the identity/session collaborator; the engine never
    manages login state itself.
    """
    user_id: int
    email: str = ''
    role: Role = Role.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
