"""
Domain entities shipped with Gatehouse and the policies governing them.
"""

from gatehouse.domain.article import Article, ArticlePolicy
from gatehouse.domain.user import User, UserPolicy

__all__ = [
    "Article",
    "ArticlePolicy",
    "User",
    "UserPolicy",
]
