from sqlalchemy import Column, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from notehub.db.base import BaseModel
from notehub.domains.access.entities import Visibility


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Notebook(BaseModel):
    __tablename__ = "notebooks"

    title = Column(String(255), nullable=False)
    course_name = Column(String(255), nullable=False, default="")
    visibility = Column(
        Enum(Visibility, name="visibility_type", values_callable=_enum_values),
        nullable=False,
        default=Visibility.PRIVATE
    )
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Relationships
    owner = relationship("User", back_populates="owned_notebooks")
    collaborators = relationship("Collaborator", back_populates="notebook", cascade="all, delete-orphan")
    pages = relationship("Page", back_populates="notebook", cascade="all, delete-orphan")
    messages = relationship("Message", back_populates="notebook", cascade="all, delete-orphan")


class Page(BaseModel):
    __tablename__ = "pages"

    notebook_id = Column(Integer, ForeignKey("notebooks.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False, default="")

    # Relationships
    notebook = relationship("Notebook", back_populates="pages")
    questions = relationship("Question", back_populates="page", cascade="all, delete-orphan")
