"""
Vendor Repository - Data Access Layer
"""
from typing import Optional

from sqlalchemy.orm import Session

from marketplace.models.vendor import Vendor


class VendorRepository:
    """Repository for Vendor persistence"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_by_id(self, vendor_id: int) -> Optional[Vendor]:
        return self.db.query(Vendor).filter(Vendor.id == vendor_id).first()
    
    def get_by_user(self, user_id: int) -> Optional[Vendor]:
        """Get the vendor owned by a user account"""
        return self.db.query(Vendor).filter(Vendor.user_id == user_id).first()
    
    def add(self, vendor: Vendor) -> Vendor:
        self.db.add(vendor)
        self.db.flush()
        return vendor
