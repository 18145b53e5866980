from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from notehub.db.base import BaseModel


class User(BaseModel):
    __tablename__ = "users"

    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Relationships
    owned_notebooks = relationship("Notebook", back_populates="owner", cascade="all, delete-orphan")
