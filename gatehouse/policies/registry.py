"""
Policy registry for Gatehouse.

This module provides the PolicyRegistry class, which maps entity types to
the policy that governs them and resolves the right policy either from a
type or from a runtime subject.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

from gatehouse.exceptions import (
    ConfigurationError,
    DuplicatePolicyError,
    PolicyNotFoundError,
    RegistryFrozenError,
)
from gatehouse.policies.base import EntityAccessPolicy, check_entity_type

logger = logging.getLogger(__name__)

DUPLICATE_MODES = ("replace", "reject")


@dataclass
class RegistryConfig:
    """
    Configuration for a PolicyRegistry.

    Attributes:
        on_duplicate: What happens when an entity type that is already
            registered is registered again. "replace" swaps the policy in
            place and logs a warning; "reject" raises DuplicatePolicyError.
    """
    on_duplicate: str = "replace"

    def __post_init__(self) -> None:
        if self.on_duplicate not in DUPLICATE_MODES:
            raise ConfigurationError(
                config_key="on_duplicate",
                expected=f"one of: {', '.join(repr(m) for m in DUPLICATE_MODES)}",
                received=self.on_duplicate,
            )


class PolicyRegistry:
    """
    Ordered registry of entity policies.

    The registry is populated once at startup, frozen, and then shared
    read-only by every authorization check.

    Resolution rules:
        - resolve_by_type() is an exact-key lookup. A registered supertype
          does not satisfy a lookup for its subclass.
        - resolve_by_instance() walks the entries in registration order and
          returns the first policy whose governed type the subject is an
          instance of. When a subject matches several registered types
          (e.g. a subclass and its base are both registered), the one
          registered first wins. Registration order is therefore a priority
          order: register specific types before general ones.
        - Re-registering an exact type replaces its policy but keeps the
          entry's original position, so the priority order does not change.

    Example:
        >>> registry = PolicyRegistry()
        >>> registry.register(Article, ArticlePolicy())
        >>> registry.register(User, UserPolicy())
        >>> registry.freeze()
        >>>
        >>> registry.resolve_by_type(Article)
        ArticlePolicy(governs=Article)
        >>> registry.resolve_by_instance(some_article)
        ArticlePolicy(governs=Article)

    Thread Safety:
        Mutations happen under an internal lock. Once frozen the registry
        is immutable and reads take no lock.
    """

    def __init__(self, config: RegistryConfig | None = None) -> None:
        """
        Initialize the registry.

        Args:
            config: Registry behavior. Defaults to replacing duplicates.
        """
        self.config = config or RegistryConfig()
        self._policies: dict[type, EntityAccessPolicy[Any]] = {}
        self._lock = threading.RLock()
        self._frozen = False

    def register(self, entity_type: type, policy: EntityAccessPolicy[Any]) -> None:
        """
        Register the policy governing an entity type.

        Args:
            entity_type: The governed class.
            policy: The policy instance.

        Raises:
            ConfigurationError: If entity_type is not a class (or is a
                protocol without @runtime_checkable), or policy is not an
                EntityAccessPolicy.
            DuplicatePolicyError: If the type is already registered and the
                registry rejects duplicates.
            RegistryFrozenError: If the registry was already frozen.
        """
        check_entity_type(entity_type)
        if not isinstance(policy, EntityAccessPolicy):
            raise ConfigurationError(
                config_key="policy",
                expected="an EntityAccessPolicy instance",
                received=policy,
            )

        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(entity_type.__name__)

            existing = self._policies.get(entity_type)
            if existing is not None:
                if self.config.on_duplicate == "reject":
                    raise DuplicatePolicyError(
                        entity_type.__name__,
                        type(existing).__name__,
                        type(policy).__name__,
                    )
                logger.warning(
                    f"Overwriting policy for '{entity_type.__name__}': "
                    f"{type(existing).__name__} -> {type(policy).__name__}"
                )

            self._policies[entity_type] = policy

            logger.debug(
                f"Registered policy '{type(policy).__name__}' "
                f"for entity type '{entity_type.__name__}'"
            )

    def freeze(self) -> None:
        """
        Close the registration window.

        Called once bootstrap is complete. Any later register() call
        raises RegistryFrozenError.
        """
        with self._lock:
            self._frozen = True
            logger.debug(f"Policy registry frozen with {len(self._policies)} entries")

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def resolve_by_type(self, entity_type: type) -> EntityAccessPolicy[Any]:
        """
        Get the policy registered for exactly this entity type.

        Raises:
            ConfigurationError: If entity_type is not a class, for example
                when an entity instance is passed by mistake.
            PolicyNotFoundError: If no policy is registered for the type.

        Example:
            >>> registry.resolve_by_type(Article).can_create(principal)
        """
        check_entity_type(entity_type)
        policies = self._snapshot()
        policy = policies.get(entity_type)
        if policy is None:
            raise PolicyNotFoundError(
                entity_type.__name__,
                [t.__name__ for t in policies],
            )
        return policy

    def resolve_by_instance(self, subject: Any) -> EntityAccessPolicy[Any]:
        """
        Get the policy for a runtime subject.

        Scans entries in registration order and returns the first whose
        governed type the subject is an instance of.

        Raises:
            PolicyNotFoundError: If no registered type matches the subject.
        """
        policies = self._snapshot()
        for entity_type, policy in policies.items():
            if isinstance(subject, entity_type):
                return policy

        raise PolicyNotFoundError(
            type(subject).__name__,
            [t.__name__ for t in policies],
        )

    def has_policy(self, entity_type: type) -> bool:
        """Check if a policy is registered for exactly this type."""
        return isinstance(entity_type, type) and entity_type in self._snapshot()

    def registered_types(self) -> list[type]:
        """List registered entity types in priority order."""
        return list(self._snapshot())

    def list_policies(self) -> dict[str, str]:
        """
        List all registered policies.

        Returns:
            Dictionary mapping entity type names to policy class names,
            in priority order.

        Example:
            >>> registry.list_policies()
            {'Article': 'ArticlePolicy', 'User': 'UserPolicy'}
        """
        return {
            entity_type.__name__: type(policy).__name__
            for entity_type, policy in self._snapshot().items()
        }

    def __len__(self) -> int:
        return len(self._snapshot())

    def __contains__(self, entity_type: object) -> bool:
        return self.has_policy(entity_type)  # type: ignore[arg-type]

    def _snapshot(self) -> dict[type, EntityAccessPolicy[Any]]:
        # Frozen registries are immutable, so the live dict is safe to read.
        if self._frozen:
            return self._policies
        with self._lock:
            return dict(self._policies)

