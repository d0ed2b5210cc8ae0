from app.models.base import Base
from app.models.work import Work, WORK_STATUSES, work_genres, work_tags
from app.models.chapter import Chapter
from app.models.page import Page
from app.models.catalog import Genre, Tag, Title, SiteConfig
from app.models.user import User
from app.models.comment import Comment, BugReport

__all__ = [
    "Base",
    "Work",
    "WORK_STATUSES",
    "work_genres",
    "work_tags",
    "Chapter",
    "Page",
    "Genre",
    "Tag",
    "Title",
    "SiteConfig",
    "User",
    "Comment",
    "BugReport",
]
