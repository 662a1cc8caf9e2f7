from sqlalchemy import Column, Integer, String, Boolean, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base


# Retail customer with loyalty balance
class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True, index=True)
    phone = Column(String, nullable=True, index=True)
    address = Column(String, nullable=True)
    gstin = Column(String, nullable=True)
    loyalty_points = Column(Integer, CheckConstraint("loyalty_points >= 0"), nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    sales = relationship("Sale", back_populates="customer")
