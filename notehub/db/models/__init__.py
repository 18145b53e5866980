from notehub.db.models.user import User
from notehub.db.models.notebook import Notebook, Page
from notehub.db.models.collaboration import Collaborator, Question, Answer, Message

__all__ = [
    "User",
    "Notebook",
    "Page",
    "Collaborator",
    "Question",
    "Answer",
    "Message"
]
