"""
Gatehouse: entity-scoped authorization dispatch.

Gatehouse decides whether a principal may list, view, create, edit or
delete a domain entity. Each entity type is governed by one policy; a
registry resolves the policy for a type or a runtime subject; a wiring
step fills the registry at startup; and AccessControl is the single
entry point call sites use.

Basic Usage:
    >>> from gatehouse import Principal, Role, create_access_control
    >>> from gatehouse.domain import Article, User
    >>>
    >>> access = create_access_control()
    >>>
    >>> author = User.register("ada@example.com", "Ada", Role.AUTHOR)
    >>> principal = author.as_principal()
    >>>
    >>> access.can_create(principal, Article)
    True
    >>> article = Article.create("Hello", "...", author)
    >>> access.can_edit(principal, article)
    True
"""

__version__ = "0.1.0"

from gatehouse.bootstrap import (
    DEFAULT_POLICY_MODULES,
    AccessControlConfig,
    create_access_control,
)
from gatehouse.core import (
    AccessControl,
    get_current_principal,
    principal_context,
)
from gatehouse.decorators import require_permission
from gatehouse.exceptions import (
    AuthorizationError,
    ConfigurationError,
    DuplicatePolicyError,
    GatehouseError,
    MissingPolicyMetadataError,
    PolicyNotFoundError,
    RegistryFrozenError,
    is_configuration_defect,
)
from gatehouse.policies import (
    EntityAccessPolicy,
    PolicyRegistry,
    RegistryConfig,
    build_registry,
    discover_policies,
    governs,
    wire_from_modules,
    wire_policies,
)
from gatehouse.types import Action, Principal, Role

__all__ = [
    "__version__",
    # Types
    "Action",
    "Principal",
    "Role",
    # Facade
    "AccessControl",
    "get_current_principal",
    "principal_context",
    "require_permission",
    # Policies
    "EntityAccessPolicy",
    "governs",
    "PolicyRegistry",
    "RegistryConfig",
    "build_registry",
    "discover_policies",
    "wire_from_modules",
    "wire_policies",
    # Bootstrap
    "AccessControlConfig",
    "DEFAULT_POLICY_MODULES",
    "create_access_control",
    # Exceptions
    "GatehouseError",
    "AuthorizationError",
    "ConfigurationError",
    "DuplicatePolicyError",
    "MissingPolicyMetadataError",
    "PolicyNotFoundError",
    "RegistryFrozenError",
    "is_configuration_defect",
]
