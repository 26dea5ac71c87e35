from sqlalchemy import JSON, Column, DateTime, Integer, Numeric, String

from .database import Base


class Order(Base):
    __tablename__ = 'orders'
    id = Column(Integer, primary_key=True, index=True)
    userId = Column(Integer, nullable=False, index=True)
    items = Column(JSON, nullable=False)
    totalAmount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(50), nullable=False, default="pending")  # freeform, e.g. 'pending', 'shipped'
    createdAt = Column(DateTime(timezone=True), nullable=False)
    updatedAt = Column(DateTime(timezone=True), nullable=False)
