"""
Pytest fixtures for Gatehouse tests.

Provides common fixtures used across all test modules.
"""

from __future__ import annotations

import pytest

from gatehouse import AccessControl, Principal, Role
from gatehouse.domain.article import Article, ArticlePolicy
from gatehouse.domain.user import User, UserPolicy
from gatehouse.policies.registry import PolicyRegistry


# ============================================================================
# User / Principal Fixtures
# ============================================================================


@pytest.fixture
def admin_user() -> User:
    """Create an administrator."""
    return User(email="root@example.com", name="Root", role=Role.ADMIN, id=100)


@pytest.fixture
def author_user() -> User:
    """Create an author with id=1."""
    return User(email="ada@example.com", name="Ada", role=Role.AUTHOR, id=1)


@pytest.fixture
def other_author_user() -> User:
    """Create a second author with id=2."""
    return User(email="grace@example.com", name="Grace", role=Role.AUTHOR, id=2)


@pytest.fixture
def reader_user() -> User:
    """Create a reader."""
    return User(email="reader@example.com", name="Reader", role=Role.READER, id=3)


@pytest.fixture
def admin(admin_user: User) -> Principal:
    return admin_user.as_principal()


@pytest.fixture
def author(author_user: User) -> Principal:
    return author_user.as_principal()


@pytest.fixture
def reader(reader_user: User) -> Principal:
    return reader_user.as_principal()


# ============================================================================
# Article Fixtures
# ============================================================================


@pytest.fixture
def own_article(author_user: User) -> Article:
    """Article written by the id=1 author."""
    return Article.create("Mine", "Written by Ada", author_user)


@pytest.fixture
def foreign_article(other_author_user: User) -> Article:
    """Article written by the id=2 author."""
    return Article.create("Theirs", "Written by Grace", other_author_user)


# ============================================================================
# Registry / Facade Fixtures
# ============================================================================


@pytest.fixture
def policy_registry() -> PolicyRegistry:
    """Create a fresh, empty policy registry."""
    return PolicyRegistry()


@pytest.fixture
def wired_registry() -> PolicyRegistry:
    """Registry holding the shipped Article and User policies, frozen."""
    registry = PolicyRegistry()
    registry.register(Article, ArticlePolicy())
    registry.register(User, UserPolicy())
    registry.freeze()
    return registry


@pytest.fixture
def access(wired_registry: PolicyRegistry) -> AccessControl:
    """AccessControl facade over the wired registry."""
    return AccessControl(wired_registry)
