"""
Tests for the require_permission decorator.
"""

from __future__ import annotations

import pytest

from gatehouse import (
    AccessControl,
    Action,
    AuthorizationError,
    ConfigurationError,
    PolicyNotFoundError,
    Principal,
    principal_context,
    require_permission,
)
from gatehouse.domain.article import Article


class TestSyncDecorator:
    """Tests for wrapping plain functions."""

    def test_allowed_call_runs(self, access: AccessControl, author: Principal, own_article: Article):
        @require_permission(access, Action.EDIT, subject_param="article")
        def rename(article: Article, title: str, principal: Principal) -> Article:
            article.change_title(title)
            return article

        result = rename(own_article, "Renamed", principal=author)
        assert result.title == "Renamed"

    def test_denied_call_does_not_run(
        self, access: AccessControl, author: Principal, foreign_article: Article
    ):
        @require_permission(access, Action.DELETE, subject_param="article")
        def delete(article: Article, principal: Principal) -> None:
            article.change_title("deleted")

        with pytest.raises(AuthorizationError):
            delete(foreign_article, author)
        assert foreign_article.title == "Theirs"

    def test_positional_subject_and_principal(
        self, access: AccessControl, admin: Principal, foreign_article: Article
    ):
        @require_permission(access, "edit", subject_param="article")
        def touch(article: Article, principal: Principal) -> str:
            return article.title

        assert touch(foreign_article, admin) == "Theirs"

    def test_class_level_action(self, access: AccessControl, reader: Principal, author: Principal):
        @require_permission(access, Action.CREATE, entity_type=Article)
        def create(title: str, principal: Principal) -> str:
            return title

        assert create("Hello", principal=author) == "Hello"
        with pytest.raises(AuthorizationError):
            create("Hello", principal=reader)

    def test_falls_back_to_context_principal(self, access: AccessControl, author: Principal):
        @require_permission(access, Action.CREATE, entity_type=Article)
        def create(title: str) -> str:
            return title

        with pytest.raises(AuthorizationError):
            create("Anonymous")
        with principal_context(author):
            assert create("Hello") == "Hello"

    def test_custom_principal_param(self, access: AccessControl, admin: Principal):
        @require_permission(access, Action.VIEW_LIST, entity_type=Article, principal_param="actor")
        def list_articles(actor: Principal) -> list[str]:
            return []

        assert list_articles(actor=admin) == []

    def test_missing_policy_propagates(self, access: AccessControl, admin: Principal):
        class Comment:
            pass

        @require_permission(access, Action.CREATE, entity_type=Comment)
        def create(principal: Principal) -> None:
            pass

        with pytest.raises(PolicyNotFoundError):
            create(principal=admin)

    def test_preserves_metadata(self, access: AccessControl):
        @require_permission(access, Action.VIEW_LIST, entity_type=Article)
        def list_articles(principal: Principal) -> list[str]:
            """List articles."""
            return []

        assert list_articles.__name__ == "list_articles"
        assert list_articles.__doc__ == "List articles."


class TestAsyncDecorator:
    """Tests for wrapping coroutine functions."""

    @pytest.mark.asyncio
    async def test_async_allowed(self, access: AccessControl, author: Principal, own_article: Article):
        @require_permission(access, Action.EDIT, subject_param="article")
        async def rename(article: Article, title: str, principal: Principal) -> str:
            article.change_title(title)
            return article.title

        assert await rename(own_article, "Async", principal=author) == "Async"

    @pytest.mark.asyncio
    async def test_async_denied(self, access: AccessControl, reader: Principal):
        called = False

        @require_permission(access, Action.CREATE, entity_type=Article)
        async def create(principal: Principal) -> None:
            nonlocal called
            called = True

        with pytest.raises(AuthorizationError):
            await create(principal=reader)
        assert called is False


class TestDecoratorConfiguration:
    """Misconfigured decorators fail at decoration time."""

    def test_instance_action_requires_subject_param(self, access: AccessControl):
        with pytest.raises(ConfigurationError):
            require_permission(access, Action.EDIT)

    def test_class_action_requires_entity_type(self, access: AccessControl):
        with pytest.raises(ConfigurationError):
            require_permission(access, Action.CREATE)

    def test_subject_param_must_exist(self, access: AccessControl):
        decorator = require_permission(access, Action.EDIT, subject_param="article")
        with pytest.raises(ConfigurationError):

            @decorator
            def edit(post: Article, principal: Principal) -> None:
                pass
