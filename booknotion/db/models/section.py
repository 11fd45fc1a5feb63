from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from booknotion.db.base import BaseModel


class Section(BaseModel):
    __tablename__ = "sections"

    name = Column(String(255), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="sections")
    notebooks = relationship("Notebook", back_populates="section")
