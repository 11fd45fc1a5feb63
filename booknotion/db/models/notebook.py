from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from booknotion.db.base import BaseModel


class Notebook(BaseModel):
    __tablename__ = "notebooks"

    name = Column(String(255), nullable=False)
    # Сериализованный rich text, хранится как есть
    content = Column(Text, nullable=False, default="")
    section_id = Column(Integer, ForeignKey("sections.id"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="notebooks")
    section = relationship("Section", back_populates="notebooks")
