from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from notehub.domains.access.entities import Role, Visibility


@dataclass
class Notebook:
    id: int
    owner_id: int
    title: str
    course_name: str
    visibility: Visibility
    created_at: datetime
    updated_at: datetime
    owner_name: Optional[str] = None
    # role of the user the notebook was loaded for: Owner, Editor, Viewer or None
    user_role: Optional[str] = None

    @property
    def is_public(self) -> bool:
        return self.visibility is Visibility.PUBLIC


@dataclass
class Collaborator:
    user_id: int
    name: str
    email: str
    role: Role


@dataclass
class Page:
    id: int
    notebook_id: int
    content: str
    created_at: datetime
    updated_at: datetime


@dataclass
class Answer:
    id: int
    question_id: int
    user_id: int
    user_name: str
    text: str
    created_at: datetime


@dataclass
class Question:
    id: int
    page_id: int
    user_id: int
    user_name: str
    text: str
    created_at: datetime
    answers: List[Answer] = field(default_factory=list)


@dataclass
class Message:
    id: int
    notebook_id: int
    user_id: int
    user_name: str
    text: str
    created_at: datetime
