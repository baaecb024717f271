"""
Article entity and its access policy.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from gatehouse.domain.user import User
from gatehouse.policies.base import EntityAccessPolicy, governs
from gatehouse.types import Principal, Role


def _utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass
class Article:
    """
    A piece of content written by a user.

    ``author`` is the owner used by ownership checks.
    """
    title: str
    content: str
    author: User
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    @classmethod
    def create(cls, title: str, content: str, author: User) -> Article:
        """Create a new article; created_at and updated_at start equal."""
        now = _utc_now()
        return cls(
            title=title,
            content=content,
            author=author,
            created_at=now,
            updated_at=now,
        )

    def change_title(self, new_title: str) -> None:
        if self.title != new_title:
            self.title = new_title
            self._touch()

    def change_content(self, new_content: str) -> None:
        if self.content != new_content:
            self.content = new_content
            self._touch()

    def _touch(self) -> None:
        self.updated_at = _utc_now()


@governs(Article)
class ArticlePolicy(EntityAccessPolicy[Article]):
    """
    Articles are public to read; authors manage their own.

    - list / detail: any authenticated principal
    - create: admins and authors
    - edit / delete: admins, or the article's author
    """

    creator_roles = (Role.ADMIN, Role.AUTHOR)

    def can_view_list(self, principal: Principal) -> bool:
        return True

    def can_view_detail(self, principal: Principal, subject: Any) -> bool:
        return self.supports(subject)

    def can_create(self, principal: Principal) -> bool:
        return principal.has_any_role(self.creator_roles)

    def can_edit(self, principal: Principal, subject: Any) -> bool:
        if not self.supports(subject):
            return False
        return principal.is_admin() or subject.author.id == principal.principal_id

    def can_delete(self, principal: Principal, subject: Any) -> bool:
        return self.can_edit(principal, subject)
