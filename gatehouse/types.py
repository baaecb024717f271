"""
Core type definitions for Gatehouse.

This module defines the value types every authorization check is built
from: the closed Role enumeration, the acting Principal and the five
Actions a policy answers for.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from gatehouse.exceptions import ConfigurationError


class Role(str, Enum):
    """Closed set of roles a principal can hold."""

    ADMIN = "admin"
    AUTHOR = "author"
    READER = "reader"

    @classmethod
    def values(cls) -> list[str]:
        """Return the string values of all roles."""
        return [role.value for role in cls]

    @classmethod
    def parse(cls, value: str | Role) -> Role:
        """
        Convert a string (case-insensitive) to a Role.

        Raises:
            ConfigurationError: If the value is not a known role.

        Example:
            >>> Role.parse("Author")
            <Role.AUTHOR: 'author'>
        """
        if isinstance(value, Role):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(
                config_key="role",
                expected=f"one of: {', '.join(cls.values())}",
                received=value,
            ) from None


class Action(str, Enum):
    """The five actions an entity policy answers for."""

    VIEW_LIST = "view_list"
    VIEW_DETAIL = "view_detail"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"

    @property
    def requires_instance(self) -> bool:
        """Whether the action targets an instance rather than an entity class."""
        return self in (Action.VIEW_DETAIL, Action.EDIT, Action.DELETE)


@dataclass(frozen=True)
class Principal:
    """
    The authenticated identity performing an action.

    Gatehouse does not authenticate anyone. A Principal is built by the
    caller from an identity it has already verified.

    Attributes:
        principal_id: Unique identifier of the principal. Compared with the
            owner identifier of subjects in ownership checks.
        role: The principal's role, always a member of Role.

    Example:
        >>> alice = Principal(principal_id=1, role=Role.AUTHOR)
        >>> alice.is_author()
        True
    """
    principal_id: Any
    role: Role

    def __post_init__(self) -> None:
        """Validate the role belongs to the closed enumeration."""
        if not isinstance(self.role, Role):
            raise ValueError(f"role must be a Role, got {self.role!r}")

    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def is_author(self) -> bool:
        return self.role is Role.AUTHOR

    def is_reader(self) -> bool:
        return self.role is Role.READER

    def has_any_role(self, roles: Iterable[Role]) -> bool:
        """Check if the principal holds any of the given roles."""
        return self.role in set(roles)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "principal_id": str(self.principal_id),
            "role": self.role.value,
        }
