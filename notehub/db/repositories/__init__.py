from notehub.db.repositories.access_repository import AccessRepository
from notehub.db.repositories.user_repository import UserRepository
from notehub.db.repositories.notebook_repository import NotebookRepository
from notehub.db.repositories.page_repository import PageRepository
from notehub.db.repositories.qna_repository import QnARepository
from notehub.db.repositories.message_repository import MessageRepository

__all__ = [
    "AccessRepository",
    "UserRepository",
    "NotebookRepository",
    "PageRepository",
    "QnARepository",
    "MessageRepository"
]
