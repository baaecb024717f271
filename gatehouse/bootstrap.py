"""
Composition root for Gatehouse.

Builds the one registry and AccessControl facade an application uses.
Call create_access_control() once at startup, before serving requests,
and inject the result wherever authorization is needed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from gatehouse.core import AccessControl
from gatehouse.domain.user import UserPolicy
from gatehouse.exceptions import ConfigurationError
from gatehouse.policies.registry import RegistryConfig
from gatehouse.policies.wiring import build_registry

logger = logging.getLogger(__name__)

# Modules scanned for policies, in priority order
DEFAULT_POLICY_MODULES: tuple[str, ...] = (
    "gatehouse.domain.article",
    "gatehouse.domain.user",
)


@dataclass
class AccessControlConfig:
    """
    Configuration for create_access_control().

    Attributes:
        policy_modules: Dotted module paths scanned for policies. Their order
            is the registry's resolution priority.
        registry: Registry behavior (duplicate handling).
        allow_user_self_service: Let principals view and edit their own
            user record without the admin role. Off by default.

    Example:
        >>> config = AccessControlConfig.from_mapping({
        ...     "policy_modules": ["gatehouse.domain.article", "myapp.policies"],
        ...     "on_duplicate": "reject",
        ... })
    """
    policy_modules: tuple[str, ...] = DEFAULT_POLICY_MODULES
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    allow_user_self_service: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.policy_modules, str):
            raise ConfigurationError(
                config_key="policy_modules",
                expected="a sequence of module paths",
                received=self.policy_modules,
            )
        self.policy_modules = tuple(self.policy_modules)
        if not self.policy_modules:
            raise ConfigurationError(
                config_key="policy_modules",
                expected="at least one module path",
                received=self.policy_modules,
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AccessControlConfig:
        """
        Build a config from plain settings.

        Recognised keys: ``policy_modules``, ``on_duplicate`` and
        ``allow_user_self_service``. Unknown keys raise ConfigurationError.
        """
        known = {"policy_modules", "on_duplicate", "allow_user_self_service"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                config_key=unknown[0],
                expected=f"one of: {', '.join(sorted(known))}",
                received=unknown[0],
            )

        kwargs: dict[str, Any] = {}
        if "policy_modules" in data:
            kwargs["policy_modules"] = data["policy_modules"]
        if "on_duplicate" in data:
            kwargs["registry"] = RegistryConfig(on_duplicate=data["on_duplicate"])
        if "allow_user_self_service" in data:
            kwargs["allow_user_self_service"] = _as_bool(
                "allow_user_self_service", data["allow_user_self_service"]
            )
        return cls(**kwargs)


def create_access_control(config: AccessControlConfig | None = None) -> AccessControl:
    """
    Wire every configured policy module and return the facade.

    The registry is frozen before it is handed to AccessControl, so the
    registration window is closed by the time any check can run.

    Raises:
        MissingPolicyMetadataError: If a discovered policy lacks @governs.
        ConfigurationError: If a policy module cannot be imported.
        DuplicatePolicyError: If the registry rejects duplicates and a type
            is wired twice.

    Example:
        >>> access = create_access_control()
        >>> access.can_create(reader, Article)
        False
    """
    config = config or AccessControlConfig()
    configured = (
        [UserPolicy(allow_self_service=True)] if config.allow_user_self_service else []
    )
    logger.debug(f"Creating access control from modules: {list(config.policy_modules)}")
    registry = build_registry(
        modules=config.policy_modules,
        config=config.registry,
        configured=configured,
    )
    return AccessControl(registry)


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("1", "true", "yes", "on"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(config_key=key, expected="a boolean", received=value)
