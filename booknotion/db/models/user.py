from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from booknotion.db.base import BaseModel


class User(BaseModel):
    __tablename__ = "users"

    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Relationships
    sections = relationship("Section", back_populates="owner")
    notebooks = relationship("Notebook", back_populates="owner")
