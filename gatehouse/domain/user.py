"""
User entity and the policy governing user management.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from gatehouse.policies.base import EntityAccessPolicy, governs
from gatehouse.types import Principal, Role

logger = logging.getLogger(__name__)


@dataclass
class User:
    """
    An account that can act in the system.

    Password hashes and credentials are owned by the authentication layer
    and are not part of this entity.

    Example:
        >>> user = User.register("ada@example.com", "Ada", Role.AUTHOR)
        >>> user.as_principal()
        Principal(principal_id=UUID('...'), role=<Role.AUTHOR: 'author'>)
    """
    email: str
    name: str
    role: Role
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def register(cls, email: str, name: str, role: Role | str) -> User:
        """Create a new user with a fresh identifier."""
        return cls(email=email, name=name, role=Role.parse(role))

    def change_email(self, new_email: str) -> None:
        self.email = new_email

    def change_name(self, new_name: str) -> None:
        self.name = new_name

    def change_role(self, new_role: Role | str) -> None:
        self.role = Role.parse(new_role)

    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def is_author(self) -> bool:
        return self.role is Role.AUTHOR

    def is_reader(self) -> bool:
        return self.role is Role.READER

    def as_principal(self) -> Principal:
        """Build the Principal acting on behalf of this user."""
        return Principal(principal_id=self.id, role=self.role)


@governs(User)
class UserPolicy(EntityAccessPolicy[User]):
    """
    User management is reserved to administrators.

    Non-admins cannot list, view, create, edit or delete user records,
    including their own. Pass ``allow_self_service=True`` to let a principal
    view and edit (but not delete) their own record.
    """

    def __init__(self, allow_self_service: bool = False) -> None:
        self.allow_self_service = allow_self_service
        if allow_self_service:
            logger.warning("UserPolicy: self-service access to own user record is enabled")

    def can_view_list(self, principal: Principal) -> bool:
        return principal.is_admin()

    def can_view_detail(self, principal: Principal, subject: Any) -> bool:
        if not self.supports(subject):
            return False
        return principal.is_admin() or self._is_self(principal, subject)

    def can_create(self, principal: Principal) -> bool:
        return principal.is_admin()

    def can_edit(self, principal: Principal, subject: Any) -> bool:
        if not self.supports(subject):
            return False
        return principal.is_admin() or self._is_self(principal, subject)

    def can_delete(self, principal: Principal, subject: Any) -> bool:
        return self.supports(subject) and principal.is_admin()

    def _is_self(self, principal: Principal, subject: User) -> bool:
        return self.allow_self_service and subject.id == principal.principal_id
