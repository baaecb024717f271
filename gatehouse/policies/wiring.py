"""
Startup wiring of entity policies into a registry.

Policies declare the type they govern with @governs. This module reads
that metadata and registers each policy exactly once, in a deterministic
order, failing fast when a policy forgot to declare its type.

Policies can be wired from an explicit list or discovered in modules.
Discovery returns classes in definition order, so the resulting priority
order is stable across runs.
"""

from __future__ import annotations

import importlib
import inspect
import logging
from collections.abc import Iterable
from types import ModuleType
from typing import Any, Union

from gatehouse.exceptions import ConfigurationError
from gatehouse.policies.base import EntityAccessPolicy
from gatehouse.policies.registry import PolicyRegistry, RegistryConfig

logger = logging.getLogger(__name__)

PolicySource = Union[EntityAccessPolicy[Any], type[EntityAccessPolicy[Any]]]


def wire_policies(registry: PolicyRegistry, policies: Iterable[PolicySource]) -> None:
    """
    Register policies into a registry in the given order.

    Classes are instantiated with no arguments; pass an instance to
    configure a policy. Every policy in the call is checked for metadata
    before any of them is registered, so a missing @governs leaves the
    registry untouched. Registration itself is not transactional: if the
    registry rejects a duplicate partway through, the entries before it
    stay registered. The same holds across modules in
    wire_from_modules. Treat any error here as fatal to startup.

    Raises:
        MissingPolicyMetadataError: If a policy does not declare the type
            it governs.
        ConfigurationError: If an item is neither a policy nor a policy class.
        DuplicatePolicyError: If the registry rejects duplicates and a type
            is wired twice.

    Example:
        >>> wire_policies(registry, [ArticlePolicy, UserPolicy(allow_self_service=True)])
    """
    entries: list[tuple[type, EntityAccessPolicy[Any]]] = []
    for source in policies:
        policy_class = source if isinstance(source, type) else type(source)
        if not issubclass(policy_class, EntityAccessPolicy):
            raise ConfigurationError(
                config_key="policies",
                expected="EntityAccessPolicy classes or instances",
                received=source,
            )
        entity_type = policy_class.get_governed_type()
        policy = source() if isinstance(source, type) else source
        entries.append((entity_type, policy))

    for entity_type, policy in entries:
        registry.register(entity_type, policy)

    logger.debug(f"Wired {len(entries)} policies")


def discover_policies(module: str | ModuleType) -> list[type[EntityAccessPolicy[Any]]]:
    """
    Find the policy classes defined in a module.

    Only classes defined in the module itself are returned (imported ones
    are skipped), in definition order. Abstract classes are skipped.
    Classes without @governs metadata are still returned so that wiring
    them fails loudly.

    Raises:
        ConfigurationError: If the module cannot be imported.
    """
    if isinstance(module, str):
        try:
            module = importlib.import_module(module)
        except ImportError as e:
            raise ConfigurationError(
                config_key="policy_modules",
                expected="an importable module path",
                received=module,
            ) from e

    found: list[type[EntityAccessPolicy[Any]]] = []
    for name, obj in vars(module).items():
        if (
            isinstance(obj, type)
            and issubclass(obj, EntityAccessPolicy)
            and obj is not EntityAccessPolicy
            and obj.__module__ == module.__name__
            and not inspect.isabstract(obj)
        ):
            found.append(obj)
            logger.debug(f"Discovered policy: {module.__name__}.{name}")
    return found


def wire_from_modules(
    registry: PolicyRegistry,
    modules: Iterable[str | ModuleType],
    configured: Iterable[EntityAccessPolicy[Any]] = (),
) -> None:
    """
    Discover and wire the policies of each module, in module order.

    A discovered class with a matching instance in ``configured`` is wired
    as that instance instead of being built with no arguments. A configured
    instance whose class no module defines logs a warning and is not wired.

    Example:
        >>> wire_from_modules(
        ...     registry,
        ...     ["myapp.users.policies"],
        ...     configured=[UserPolicy(allow_self_service=True)],
        ... )
    """
    overrides = {type(policy): policy for policy in configured}
    used: set[type] = set()
    for module in modules:
        policies: list[PolicySource] = []
        for policy_class in discover_policies(module):
            if policy_class in overrides:
                used.add(policy_class)
                policies.append(overrides[policy_class])
            else:
                policies.append(policy_class)
        wire_policies(registry, policies)

    for policy_class, policy in overrides.items():
        if policy_class not in used:
            logger.warning(
                f"Configured policy {policy!r} is not defined in any policy module; "
                f"it was not wired"
            )


def build_registry(
    policies: Iterable[PolicySource] | None = None,
    modules: Iterable[str | ModuleType] | None = None,
    config: RegistryConfig | None = None,
    configured: Iterable[EntityAccessPolicy[Any]] = (),
) -> PolicyRegistry:
    """
    Build and freeze a registry.

    Explicit policies are registered first, then discovered ones, so the
    explicit list sits ahead of module contents in resolution order.
    ``configured`` instances replace their classes during module discovery
    (see wire_from_modules).

    Example:
        >>> registry = build_registry(modules=["myapp.articles.policies"])
        >>> registry.is_frozen
        True
    """
    registry = PolicyRegistry(config)
    if policies is not None:
        wire_policies(registry, policies)
    configured = list(configured)
    if modules is not None or configured:
        wire_from_modules(registry, modules or (), configured)
    registry.freeze()
    logger.info(f"Policy registry ready: {registry.list_policies()}")
    return registry
