"""
SQLAlchemy Vendor model
"""
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from marketplace.database import Base

VENDOR_STATUSES = ('pending', 'approved', 'rejected', 'suspended')


class Vendor(Base):
    """Vendor database model"""
    
    __tablename__ = "vendors"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    # Owning user account; users live in the identity provider
    user_id = Column(Integer, nullable=False, unique=True, index=True)
    business_name = Column(String(100), nullable=False)
    business_description = Column(Text, nullable=True)
    contact_email = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default='pending', index=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(Integer, nullable=True)
    rejection_reason = Column(String(500), nullable=True)
    commission_rate = Column(Numeric(5, 2), nullable=False, default=10)
    is_active = Column(Boolean, nullable=False, default=True)
    
    rating_average = Column(Numeric(2, 1), nullable=False, default=0)
    rating_count = Column(Integer, nullable=False, default=0)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    products = relationship("Product", back_populates="vendor")
    
    __table_args__ = (
        CheckConstraint('commission_rate >= 0 AND commission_rate <= 100', name='check_commission_rate_range'),
        CheckConstraint(f"status IN {VENDOR_STATUSES}", name='check_vendor_status_valid'),
    )
    
    @property
    def is_approved(self) -> bool:
        return self.status == 'approved' and bool(self.is_active)
    
    def __repr__(self):
        return f"<Vendor(id={self.id}, business_name='{self.business_name}', status='{self.status}')>"
