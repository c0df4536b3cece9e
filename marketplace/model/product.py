"""
Product model. Owned by the catalog service; read here to decorate chat responses.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from marketplace.core.database import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    price = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default="on_sale")  # on_sale, reserved, sold
    image_url = Column(String, nullable=True)
    seller_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
