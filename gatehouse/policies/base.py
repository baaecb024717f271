"""
Policy base class for Gatehouse.

Each entity type in the application is governed by exactly one policy.
A policy answers five questions about a principal and, where the action
targets an instance, a subject. The governed type is declared on the
policy class with the @governs decorator and read back by the wiring step.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from gatehouse.exceptions import ConfigurationError, MissingPolicyMetadataError
from gatehouse.types import Action

if TYPE_CHECKING:
    from gatehouse.types import Principal

# Type variable for the entity a policy governs
T = TypeVar("T")

P = TypeVar("P", bound="type[EntityAccessPolicy[Any]]")


class EntityAccessPolicy(ABC, Generic[T]):
    """
    Abstract base class for all entity policies.

    Every implementation exposes the same five checks. All of them are pure:
    no side effects, no I/O, and they never raise for well-formed input.
    Denial is expressed as False.

    A policy must not assume more about ``subject`` than the type it was
    registered for. When handed a subject of another type it returns False.
    Use :meth:`supports` for that guard.

    Example:
        >>> @governs(Document)
        ... class DocumentPolicy(EntityAccessPolicy[Document]):
        ...     def can_view_list(self, principal):
        ...         return True
        ...
        ...     def can_view_detail(self, principal, subject):
        ...         return self.supports(subject)
        ...
        ...     def can_create(self, principal):
        ...         return principal.is_admin()
        ...
        ...     def can_edit(self, principal, subject):
        ...         return self.supports(subject) and principal.is_admin()
        ...
        ...     def can_delete(self, principal, subject):
        ...         return self.can_edit(principal, subject)
    """

    # Set by the @governs decorator
    _governed_type: type | None = None

    @abstractmethod
    def can_view_list(self, principal: Principal) -> bool:
        """Can the principal list entities of the governed type?"""

    @abstractmethod
    def can_view_detail(self, principal: Principal, subject: Any) -> bool:
        """Can the principal view this particular subject?"""

    @abstractmethod
    def can_create(self, principal: Principal) -> bool:
        """Can the principal create new entities of the governed type?"""

    @abstractmethod
    def can_edit(self, principal: Principal, subject: Any) -> bool:
        """Can the principal modify this subject?"""

    @abstractmethod
    def can_delete(self, principal: Principal, subject: Any) -> bool:
        """
        Can the principal delete this subject?

        Usually the same rule as can_edit, kept separate so the two can
        diverge.
        """

    @classmethod
    def get_governed_type(cls) -> type:
        """
        Get the entity type this policy governs.

        Raises:
            MissingPolicyMetadataError: If the class was never decorated
                with @governs.
        """
        # Read from the class itself so a subclass does not silently
        # inherit its parent's registration.
        governed = cls.__dict__.get("_governed_type")
        if governed is None:
            raise MissingPolicyMetadataError(cls.__name__)
        return governed

    @classmethod
    def declares_governed_type(cls) -> bool:
        """Whether the class carries its own @governs metadata."""
        return cls.__dict__.get("_governed_type") is not None

    def supports(self, subject: Any) -> bool:
        """Check that a subject is an instance of the governed type."""
        governed = type(self).__dict__.get("_governed_type")
        if governed is None:
            return False
        return isinstance(subject, governed)

    def check(self, action: Action, principal: Principal, subject: Any = None) -> bool:
        """
        Dispatch an Action to the matching can_* method.

        For VIEW_LIST and CREATE the subject is ignored.

        Example:
            >>> policy.check(Action.EDIT, principal, article)
            True
        """
        if action is Action.VIEW_LIST:
            return self.can_view_list(principal)
        if action is Action.CREATE:
            return self.can_create(principal)
        if action is Action.VIEW_DETAIL:
            return self.can_view_detail(principal, subject)
        if action is Action.EDIT:
            return self.can_edit(principal, subject)
        return self.can_delete(principal, subject)

    def __repr__(self) -> str:
        governed = type(self).__dict__.get("_governed_type")
        name = governed.__name__ if governed is not None else None
        return f"{type(self).__name__}(governs={name})"


def check_entity_type(entity_type: Any, config_key: str = "entity_type") -> None:
    """
    Reject anything that cannot key a registry entry.

    A key must be a class usable with isinstance(). Protocols qualify only
    when decorated with @runtime_checkable.

    Raises:
        ConfigurationError: If entity_type is not a usable class.
    """
    if not isinstance(entity_type, type):
        raise ConfigurationError(
            config_key=config_key,
            expected="an entity class",
            received=type(entity_type).__name__ + " instance",
        )
    if getattr(entity_type, "_is_protocol", False) and not getattr(
        entity_type, "_is_runtime_protocol", False
    ):
        raise ConfigurationError(
            config_key=config_key,
            expected="a @runtime_checkable protocol",
            received=entity_type.__name__,
        )


def governs(entity_type: type) -> Callable[[P], P]:
    """
    Class decorator declaring which entity type a policy governs.

    This is the registration metadata the wiring step reads. A policy
    without it cannot be wired.

    Args:
        entity_type: The class (or ABC / runtime-checkable protocol) whose
            instances the policy governs.

    Raises:
        ConfigurationError: If entity_type is not a class or the decorated
            class is not an EntityAccessPolicy.

    Example:
        >>> @governs(Article)
        ... class ArticlePolicy(EntityAccessPolicy[Article]):
        ...     ...
    """
    check_entity_type(entity_type, config_key="governs")

    def decorator(policy_class: P) -> P:
        if not (isinstance(policy_class, type) and issubclass(policy_class, EntityAccessPolicy)):
            raise ConfigurationError(
                config_key="governs",
                expected="an EntityAccessPolicy subclass",
                received=policy_class,
            )
        policy_class._governed_type = entity_type
        return policy_class

    return decorator
