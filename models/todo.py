from sqlalchemy import Column, String, Text, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Todo(BaseModel, Base):
    __tablename__ = "todos"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)

    owner = relationship("User", back_populates="todos")

    __table_args__ = (
        Index("ix_todos_user_id_created_at", "user_id", "created_at"),
    )
