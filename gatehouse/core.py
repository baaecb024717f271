"""
Access control facade for Gatehouse.

This module provides AccessControl, the single authorization entry point
for command handlers and presentation code, and the context-local
"current principal" used when a caller does not pass one explicitly.
"""

from __future__ import annotations

import contextvars
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from gatehouse.exceptions import AuthorizationError
from gatehouse.policies.registry import PolicyRegistry
from gatehouse.types import Action, Principal

logger = logging.getLogger(__name__)

# Context variable for the current principal
_current_principal: contextvars.ContextVar[Principal | None] = contextvars.ContextVar(
    "gatehouse_principal", default=None
)


def get_current_principal() -> Principal | None:
    """Get the current principal from context."""
    return _current_principal.get()


@contextmanager
def principal_context(principal: Principal) -> Iterator[Principal]:
    """
    Context manager to set the current principal.

    authorize() and the require_permission decorator fall back to this
    principal when none is passed explicitly.

    Example:
        >>> with principal_context(alice):
        ...     update_article(article_id, payload)
    """
    token = _current_principal.set(principal)
    try:
        yield principal
    finally:
        _current_principal.reset(token)


class AccessControl:
    """
    Entry point for every authorization check.

    Each check resolves the governing policy from the registry and asks it.
    Nothing else happens here: no caching, no defaults, no error handling.
    When no policy is registered, PolicyNotFoundError propagates to the
    caller. That is a wiring bug and must not be mistaken for a denial.

    Callers run the matching check before any mutating domain operation and
    turn a False into their own "forbidden" response.

    Example:
        >>> access = AccessControl(registry)
        >>>
        >>> if not access.can_create(principal, Article):
        ...     return forbidden()
        >>> article = Article.create(title, content, author)
        >>>
        >>> if not access.can_edit(principal, article):
        ...     return forbidden()
    """

    def __init__(self, registry: PolicyRegistry) -> None:
        """
        Initialize the facade.

        Args:
            registry: A populated registry, normally frozen by the
                composition root before any check runs.
        """
        if not registry.is_frozen:
            logger.warning(
                "AccessControl created over a registry that is not frozen; "
                "finish wiring and call freeze() before serving requests"
            )
        self.registry = registry

    def can_view_list(self, principal: Principal, entity_type: type) -> bool:
        """Can the principal list entities of this type?"""
        allowed = self.registry.resolve_by_type(entity_type).can_view_list(principal)
        self._log_decision(principal, Action.VIEW_LIST, entity_type, allowed)
        return allowed

    def can_view_detail(self, principal: Principal, subject: Any) -> bool:
        """Can the principal view this subject?"""
        allowed = self.registry.resolve_by_instance(subject).can_view_detail(principal, subject)
        self._log_decision(principal, Action.VIEW_DETAIL, type(subject), allowed)
        return allowed

    def can_create(self, principal: Principal, entity_type: type) -> bool:
        """Can the principal create entities of this type?"""
        allowed = self.registry.resolve_by_type(entity_type).can_create(principal)
        self._log_decision(principal, Action.CREATE, entity_type, allowed)
        return allowed

    def can_edit(self, principal: Principal, subject: Any) -> bool:
        """Can the principal modify this subject?"""
        allowed = self.registry.resolve_by_instance(subject).can_edit(principal, subject)
        self._log_decision(principal, Action.EDIT, type(subject), allowed)
        return allowed

    def can_delete(self, principal: Principal, subject: Any) -> bool:
        """Can the principal delete this subject?"""
        allowed = self.registry.resolve_by_instance(subject).can_delete(principal, subject)
        self._log_decision(principal, Action.DELETE, type(subject), allowed)
        return allowed

    def can(self, principal: Principal, action: Action | str, subject: Any) -> bool:
        """
        Check any action by name.

        For VIEW_LIST and CREATE ``subject`` is the entity class; for the
        other actions it is the instance being acted upon.

        Raises:
            ValueError: If action is not a known Action.
            PolicyNotFoundError: If no policy governs the subject.

        Example:
            >>> access.can(principal, "edit", article)
            True
        """
        action = Action(action)
        if action is Action.VIEW_LIST:
            return self.can_view_list(principal, subject)
        if action is Action.CREATE:
            return self.can_create(principal, subject)
        if action is Action.VIEW_DETAIL:
            return self.can_view_detail(principal, subject)
        if action is Action.EDIT:
            return self.can_edit(principal, subject)
        return self.can_delete(principal, subject)

    def authorize(
        self,
        action: Action | str,
        subject: Any,
        principal: Principal | None = None,
    ) -> None:
        """
        Apply a decision, raising when it is a denial.

        Uses the current context principal when ``principal`` is None.

        Raises:
            AuthorizationError: If the action is denied or no principal is
                available.
            PolicyNotFoundError: If no policy governs the subject. This is
                deliberately not converted into AuthorizationError.
            ConfigurationError: If a list or create action is given an
                instance instead of the entity class.

        Example:
            >>> access.authorize(Action.DELETE, article, principal)
            >>> repository.delete(article)
        """
        action = Action(action)
        if principal is None:
            principal = get_current_principal()
        resource = _resource_name(subject)

        if principal is None:
            raise AuthorizationError(
                principal=None,
                action=action.value,
                resource=resource,
                reason="No authenticated principal",
            )

        if not self.can(principal, action, subject):
            policy = (
                self.registry.resolve_by_instance(subject)
                if action.requires_instance
                else self.registry.resolve_by_type(subject)
            )
            raise AuthorizationError(
                principal=str(principal.principal_id),
                action=action.value,
                resource=resource,
                reason=f"{type(policy).__name__} denied '{action.value}' "
                f"for role '{principal.role.value}'",
            )

    def _log_decision(
        self,
        principal: Principal,
        action: Action,
        entity_type: Any,
        allowed: bool,
    ) -> None:
        logger.debug(
            f"{'Allowed' if allowed else 'Denied'} '{action.value}' on "
            f"'{_resource_name(entity_type)}' for principal "
            f"'{principal.principal_id}' ({principal.role.value})"
        )


def _resource_name(subject: Any) -> str:
    if isinstance(subject, type):
        return subject.__name__
    return type(subject).__name__
