"""
User model. Owned by the account service; read here to decorate chat responses.
"""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from marketplace.core.database import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    username = Column(String, unique=True, index=True, nullable=False)
    nickname = Column(String, nullable=False)
    profile_image = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
