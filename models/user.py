from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship


class User(BaseModel, Base):
    __tablename__ = "users"
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    # Only the most recently issued refresh token is accepted.
    refresh_token = Column(Text, nullable=True)

    todos = relationship(
        "Todo",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
