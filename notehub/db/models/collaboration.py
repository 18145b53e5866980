from sqlalchemy import Column, Enum, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from notehub.db.base import BaseModel
from notehub.db.models.notebook import _enum_values
from notehub.domains.access.entities import Role


class Collaborator(BaseModel):
    __tablename__ = "notebook_collaborators"

    # no unique constraint on (notebook_id, user_id): duplicate grants are tolerated
    notebook_id = Column(Integer, ForeignKey("notebooks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(Role, name="role_type", values_callable=_enum_values), nullable=False)

    # Relationships
    notebook = relationship("Notebook", back_populates="collaborators")
    user = relationship("User")


class Question(BaseModel):
    __tablename__ = "questions"

    page_id = Column(Integer, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    text = Column(Text, nullable=False)

    # Relationships
    page = relationship("Page", back_populates="questions")
    user = relationship("User")
    answers = relationship(
        "Answer", back_populates="question", cascade="all, delete-orphan", order_by="Answer.id"
    )


class Answer(BaseModel):
    __tablename__ = "answers"

    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    text = Column(Text, nullable=False)

    # Relationships
    question = relationship("Question", back_populates="answers")
    user = relationship("User")


class Message(BaseModel):
    __tablename__ = "messages"

    notebook_id = Column(Integer, ForeignKey("notebooks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    text = Column(Text, nullable=False)

    # Relationships
    notebook = relationship("Notebook", back_populates="messages")
    user = relationship("User")
