"""
Decorators for Gatehouse authorization.

require_permission guards a command handler or view function: it runs the
authorization check before the wrapped function and raises
AuthorizationError on a denial, so the function body only ever runs for
permitted calls.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar

from gatehouse.core import AccessControl
from gatehouse.exceptions import ConfigurationError
from gatehouse.types import Action, Principal

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def require_permission(
    access: AccessControl,
    action: Action | str,
    subject_param: str | None = None,
    entity_type: type | None = None,
    principal_param: str = "principal",
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Authorize a call before running it.

    Args:
        access: The AccessControl facade to check against.
        action: The action the function performs.
        subject_param: Name of the parameter holding the subject instance.
            Required for VIEW_DETAIL, EDIT and DELETE.
        entity_type: The entity class. Required for VIEW_LIST and CREATE.
        principal_param: Name of the parameter holding the Principal. When
            the argument is missing or None, the current context principal
            is used.

    Raises:
        ConfigurationError: At decoration time, if the subject source does
            not fit the action.

    Example:
        >>> @require_permission(access, Action.EDIT, subject_param="article")
        ... def update_article(article: Article, title: str, principal: Principal):
        ...     article.change_title(title)
        >>>
        >>> @require_permission(access, Action.CREATE, entity_type=Article)
        ... async def create_article(title: str, content: str, principal: Principal):
        ...     ...
    """
    action = Action(action)
    if action.requires_instance and subject_param is None:
        raise ConfigurationError(
            config_key="subject_param",
            expected=f"a parameter name for '{action.value}'",
        )
    if not action.requires_instance and entity_type is None:
        raise ConfigurationError(
            config_key="entity_type",
            expected=f"an entity class for '{action.value}'",
        )

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        signature = inspect.signature(func)
        if subject_param is not None and subject_param not in signature.parameters:
            raise ConfigurationError(
                config_key="subject_param",
                expected=f"a parameter of {func.__qualname__}",
                received=subject_param,
            )

        def check(args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
            bound = signature.bind_partial(*args, **kwargs)
            principal: Principal | None = bound.arguments.get(principal_param)
            if action.requires_instance:
                subject = bound.arguments.get(subject_param)
            else:
                subject = entity_type
            logger.debug(f"Authorizing '{action.value}' before {func.__qualname__}")
            access.authorize(action, subject, principal)

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                check(args, kwargs)
                return await func(*args, **kwargs)

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            check(args, kwargs)
            return func(*args, **kwargs)

        return sync_wrapper

    return decorator
