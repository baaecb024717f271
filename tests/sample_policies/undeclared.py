"""A concrete policy that forgot its @governs declaration."""

from __future__ import annotations

from typing import Any

from gatehouse import Principal
from gatehouse.policies.base import EntityAccessPolicy


class Note:
    pass


class NotePolicy(EntityAccessPolicy[Note]):
    def can_view_list(self, principal: Principal) -> bool:
        return True

    def can_view_detail(self, principal: Principal, subject: Any) -> bool:
        return True

    def can_create(self, principal: Principal) -> bool:
        return True

    def can_edit(self, principal: Principal, subject: Any) -> bool:
        return True

    def can_delete(self, principal: Principal, subject: Any) -> bool:
        return True
