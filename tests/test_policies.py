"""
Tests for the policy system.

Tests cover:
- EntityAccessPolicy base class and @governs metadata
- ArticlePolicy rules
- UserPolicy rules, including the self-service option
"""

from __future__ import annotations

from typing import Any, Protocol

import pytest

from gatehouse import Action, ConfigurationError, MissingPolicyMetadataError, Principal, Role
from gatehouse.domain.article import Article, ArticlePolicy
from gatehouse.domain.user import User, UserPolicy
from gatehouse.policies.base import EntityAccessPolicy, governs


class Widget:
    pass


class Named(Protocol):
    name: str


class OpenPolicy(EntityAccessPolicy[Widget]):
    """Concrete policy without metadata."""

    def can_view_list(self, principal: Principal) -> bool:
        return True

    def can_view_detail(self, principal: Principal, subject: Any) -> bool:
        return self.supports(subject)

    def can_create(self, principal: Principal) -> bool:
        return True

    def can_edit(self, principal: Principal, subject: Any) -> bool:
        return self.supports(subject)

    def can_delete(self, principal: Principal, subject: Any) -> bool:
        return False


class TestPolicyBaseClass:
    """Tests for EntityAccessPolicy and @governs."""

    def test_cannot_instantiate_abstract_base(self):
        with pytest.raises(TypeError):
            EntityAccessPolicy()  # type: ignore[abstract]

    def test_missing_metadata_raises(self):
        with pytest.raises(MissingPolicyMetadataError) as exc_info:
            OpenPolicy.get_governed_type()
        assert exc_info.value.policy_name == "OpenPolicy"
        assert not OpenPolicy.declares_governed_type()

    def test_governs_records_type(self):
        @governs(Widget)
        class WidgetPolicy(OpenPolicy):
            pass

        assert WidgetPolicy.get_governed_type() is Widget
        assert WidgetPolicy.declares_governed_type()

    def test_metadata_is_not_inherited(self):
        @governs(Widget)
        class WidgetPolicy(OpenPolicy):
            pass

        class SpecialWidgetPolicy(WidgetPolicy):
            pass

        with pytest.raises(MissingPolicyMetadataError):
            SpecialWidgetPolicy.get_governed_type()

    def test_governs_rejects_non_class(self):
        with pytest.raises(ConfigurationError):
            governs("Widget")  # type: ignore[arg-type]

    def test_governs_rejects_unchecked_protocol(self):
        with pytest.raises(ConfigurationError) as exc_info:
            governs(Named)
        assert exc_info.value.config_key == "governs"
        assert exc_info.value.received == "Named"

    def test_governs_rejects_non_policy(self):
        with pytest.raises(ConfigurationError):
            governs(Widget)(Widget)  # type: ignore[type-var]

    def test_supports_without_metadata_is_false(self):
        assert OpenPolicy().supports(Widget()) is False

    def test_check_dispatches_actions(self, reader: Principal):
        @governs(Widget)
        class WidgetPolicy(OpenPolicy):
            pass

        policy = WidgetPolicy()
        widget = Widget()
        assert policy.check(Action.VIEW_LIST, reader) is True
        assert policy.check(Action.CREATE, reader) is True
        assert policy.check(Action.VIEW_DETAIL, reader, widget) is True
        assert policy.check(Action.EDIT, reader, widget) is True
        assert policy.check(Action.DELETE, reader, widget) is False

    def test_repr_names_governed_type(self):
        assert repr(ArticlePolicy()) == "ArticlePolicy(governs=Article)"


class TestArticlePolicy:
    """Tests for the article rules."""

    def test_anyone_can_list(self, admin: Principal, author: Principal, reader: Principal):
        policy = ArticlePolicy()
        assert all(policy.can_view_list(p) for p in (admin, author, reader))

    def test_anyone_can_view_an_article(self, reader: Principal, foreign_article: Article):
        assert ArticlePolicy().can_view_detail(reader, foreign_article) is True

    def test_reader_cannot_create(self, reader: Principal):
        assert ArticlePolicy().can_create(reader) is False

    def test_author_and_admin_can_create(self, author: Principal, admin: Principal):
        policy = ArticlePolicy()
        assert policy.can_create(author) is True
        assert policy.can_create(admin) is True

    def test_author_manages_own_article(self, author: Principal, own_article: Article):
        policy = ArticlePolicy()
        assert policy.can_edit(author, own_article) is True
        assert policy.can_delete(author, own_article) is True

    def test_author_cannot_touch_foreign_article(self, author: Principal, foreign_article: Article):
        policy = ArticlePolicy()
        assert policy.can_edit(author, foreign_article) is False
        assert policy.can_delete(author, foreign_article) is False

    def test_admin_edits_any_article(self, admin: Principal, foreign_article: Article):
        policy = ArticlePolicy()
        assert policy.can_edit(admin, foreign_article) is True
        assert policy.can_delete(admin, foreign_article) is True

    def test_reader_owning_article_can_edit(self, reader_user: User, reader: Principal):
        # Ownership alone is enough; the role only matters for creation.
        article = Article.create("Legacy", "Written before demotion", reader_user)
        assert ArticlePolicy().can_edit(reader, article) is True

    def test_mismatched_subject_is_denied(self, admin: Principal, admin_user: User):
        policy = ArticlePolicy()
        assert policy.can_view_detail(admin, admin_user) is False
        assert policy.can_edit(admin, admin_user) is False
        assert policy.can_delete(admin, object()) is False


class TestUserPolicy:
    """Tests for the user-management rules."""

    def test_admin_has_full_access(self, admin: Principal, reader_user: User):
        policy = UserPolicy()
        assert policy.can_view_list(admin)
        assert policy.can_view_detail(admin, reader_user)
        assert policy.can_create(admin)
        assert policy.can_edit(admin, reader_user)
        assert policy.can_delete(admin, reader_user)

    @pytest.mark.parametrize("role", [Role.AUTHOR, Role.READER])
    def test_non_admin_has_no_access(self, role: Role, reader_user: User):
        principal = Principal(principal_id=42, role=role)
        policy = UserPolicy()
        assert not policy.can_view_list(principal)
        assert not policy.can_view_detail(principal, reader_user)
        assert not policy.can_create(principal)
        assert not policy.can_edit(principal, reader_user)
        assert not policy.can_delete(principal, reader_user)

    def test_self_service_denied_by_default(self, author_user: User, author: Principal):
        policy = UserPolicy()
        assert policy.can_view_detail(author, author_user) is False
        assert policy.can_edit(author, author_user) is False

    def test_self_service_when_enabled(
        self, author_user: User, author: Principal, other_author_user: User
    ):
        policy = UserPolicy(allow_self_service=True)
        assert policy.can_view_detail(author, author_user) is True
        assert policy.can_edit(author, author_user) is True
        assert policy.can_delete(author, author_user) is False
        assert policy.can_edit(author, other_author_user) is False

    def test_self_service_logs_warning(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level("WARNING", logger="gatehouse.domain.user"):
            UserPolicy(allow_self_service=True)
        assert "self-service" in caplog.text

    def test_mismatched_subject_is_denied(self, admin: Principal, own_article: Article):
        policy = UserPolicy()
        assert policy.can_view_detail(admin, own_article) is False
        assert policy.can_edit(admin, own_article) is False
        assert policy.can_delete(admin, own_article) is False


class TestDomainEntities:
    """Tests for the shipped entities."""

    def test_register_parses_role(self):
        user = User.register("x@example.com", "X", "Author")
        assert user.role is Role.AUTHOR
        assert user.as_principal().principal_id == user.id

    def test_change_role(self, reader_user: User):
        reader_user.change_role("admin")
        assert reader_user.is_admin()

    def test_create_article_timestamps(self, author_user: User):
        article = Article.create("T", "C", author_user)
        assert article.created_at == article.updated_at
        assert article.created_at.tzinfo is not None

    def test_unchanged_title_keeps_timestamp(self, own_article: Article):
        before = own_article.updated_at
        own_article.change_title(own_article.title)
        assert own_article.updated_at == before

    def test_changed_content_touches_timestamp(self, own_article: Article):
        before = own_article.updated_at
        own_article.change_content("Rewritten")
        assert own_article.content == "Rewritten"
        assert own_article.updated_at >= before
