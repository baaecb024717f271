"""
Custom exceptions for Gatehouse.

This module defines the exception hierarchy for the package. Two families
live here and must never be confused by callers:

- Configuration defects (PolicyNotFoundError, MissingPolicyMetadataError,
  DuplicatePolicyError, RegistryFrozenError, ConfigurationError). These mean
  the policy wiring is broken and should surface as an internal error.
- Denials (AuthorizationError). These are ordinary "forbidden" outcomes
  raised only when a caller asks Gatehouse to apply a decision.
"""

from __future__ import annotations

from typing import Any


class GatehouseError(Exception):
    """
    Base exception for all Gatehouse errors.

    Attributes:
        message: Human-readable error description.
        details: Additional context about the error.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class AuthorizationError(GatehouseError):
    """
    Raised when a principal is not permitted to perform an action.

    Only raised by AccessControl.authorize() and the require_permission
    decorator. The plain can_* checks express denial as False.

    Attributes:
        principal: The principal ID that attempted the action (None when
            no principal was available).
        action: The action that was attempted (e.g., "edit").
        resource: Name of the entity type the action targeted.
        reason: Explanation of why authorization was denied.

    Example:
        >>> raise AuthorizationError(
        ...     principal="42",
        ...     action="delete",
        ...     resource="Article",
        ...     reason="Policy ArticlePolicy denied 'delete'"
        ... )
    """

    def __init__(
        self,
        principal: str | None,
        action: str,
        resource: str,
        reason: str | None = None,
    ) -> None:
        self.principal = principal
        self.action = action
        self.resource = resource
        self.reason = reason or "Authorization denied"

        who = f"Principal '{principal}'" if principal is not None else "Anonymous caller"
        message = (
            f"Authorization denied: {who} cannot perform "
            f"'{action}' on '{resource}'. Reason: {self.reason}"
        )
        details = {
            "principal": principal,
            "action": action,
            "resource": resource,
            "reason": self.reason,
        }
        super().__init__(message, details)


class ConfigurationError(GatehouseError):
    """
    Raised when Gatehouse is configured with an invalid value.

    Attributes:
        config_key: The configuration key that has an issue.
        expected: What was expected for this configuration.
        received: What was actually provided.

    Example:
        >>> raise ConfigurationError(
        ...     config_key="on_duplicate",
        ...     expected="one of: 'replace', 'reject'",
        ...     received="ignore"
        ... )
    """

    def __init__(
        self,
        config_key: str,
        expected: str | None = None,
        received: Any = None,
    ) -> None:
        self.config_key = config_key
        self.expected = expected
        self.received = received

        message = f"Configuration error for '{config_key}'"
        if expected:
            message += f": expected {expected}"
        if received is not None:
            message += f", got {received!r}"

        details = {
            "config_key": config_key,
            "expected": expected,
            "received": str(received) if received is not None else None,
        }
        super().__init__(message, details)


class PolicyNotFoundError(GatehouseError):
    """
    Raised when no policy can be resolved for an entity type or subject.

    This is always a wiring defect, never a denial. It is not caught
    anywhere inside Gatehouse.

    Attributes:
        entity_type: Name of the type for which no policy was found.
        available_policies: Names of the registered types (for debugging).
    """

    def __init__(
        self,
        entity_type: str,
        available_policies: list[str] | None = None,
    ) -> None:
        self.entity_type = entity_type
        self.available_policies = available_policies or []

        message = f"No policy registered for '{entity_type}'"
        if available_policies:
            message += f". Registered types: {', '.join(available_policies)}"

        details = {
            "entity_type": entity_type,
            "available_policies": self.available_policies,
        }
        super().__init__(message, details)


class MissingPolicyMetadataError(GatehouseError):
    """
    Raised when a policy is wired without declaring the type it governs.

    Attributes:
        policy_name: Class name of the offending policy.
    """

    def __init__(self, policy_name: str) -> None:
        self.policy_name = policy_name
        message = (
            f"Policy '{policy_name}' does not declare a governed entity type. "
            f"Decorate it with @governs(EntityType)"
        )
        super().__init__(message, {"policy_name": policy_name})


class DuplicatePolicyError(GatehouseError):
    """
    Raised when an entity type is registered twice and duplicates are rejected.

    Attributes:
        entity_type: Name of the type registered twice.
        existing_policy: Class name of the policy already registered.
        new_policy: Class name of the policy that was refused.
    """

    def __init__(self, entity_type: str, existing_policy: str, new_policy: str) -> None:
        self.entity_type = entity_type
        self.existing_policy = existing_policy
        self.new_policy = new_policy

        message = (
            f"Policy for '{entity_type}' is already registered "
            f"({existing_policy}); refusing {new_policy}"
        )
        details = {
            "entity_type": entity_type,
            "existing_policy": existing_policy,
            "new_policy": new_policy,
        }
        super().__init__(message, details)


class RegistryFrozenError(GatehouseError):
    """Raised when a frozen registry is modified after bootstrap."""

    def __init__(self, entity_type: str) -> None:
        self.entity_type = entity_type
        message = (
            f"Cannot register a policy for '{entity_type}': "
            f"the registry was frozen after bootstrap"
        )
        super().__init__(message, {"entity_type": entity_type})


def is_configuration_defect(error: BaseException) -> bool:
    """
    Tell whether an error means the authorization wiring is broken.

    Outer layers use this to map an error to an internal-error response
    instead of a forbidden one.
    """
    return isinstance(
        error,
        (
            PolicyNotFoundError,
            MissingPolicyMetadataError,
            DuplicatePolicyError,
            RegistryFrozenError,
            ConfigurationError,
        ),
    )
