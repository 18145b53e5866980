from notehub.domains.notebooks.entities import Answer, Collaborator, Message, Notebook, Page, Question
from notehub.domains.notebooks.schemas import (
    ApiResponse, CollaboratorCreate, NotebookCreate, NotebookUpdate, PageContent, TextCreate
)

__all__ = [
    "Answer", "Collaborator", "Message", "Notebook", "Page", "Question",
    "ApiResponse", "CollaboratorCreate", "NotebookCreate", "NotebookUpdate", "PageContent", "TextCreate"
]
