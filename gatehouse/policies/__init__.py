"""
Policy system for Gatehouse.

One policy per entity type, registered by the type it governs and resolved
from either that type or a runtime subject.

Quick Start:
    >>> from gatehouse.policies import EntityAccessPolicy, governs, build_registry
    >>>
    >>> @governs(Document)
    ... class DocumentPolicy(EntityAccessPolicy[Document]):
    ...     ...
    >>>
    >>> registry = build_registry(policies=[DocumentPolicy])
    >>> registry.resolve_by_instance(document).can_edit(principal, document)
"""

from gatehouse.policies.base import EntityAccessPolicy, governs
from gatehouse.policies.registry import PolicyRegistry, RegistryConfig
from gatehouse.policies.wiring import (
    build_registry,
    discover_policies,
    wire_from_modules,
    wire_policies,
)

__all__ = [
    # Base classes
    "EntityAccessPolicy",
    "governs",
    # Registry
    "PolicyRegistry",
    "RegistryConfig",
    # Wiring
    "build_registry",
    "discover_policies",
    "wire_from_modules",
    "wire_policies",
]
