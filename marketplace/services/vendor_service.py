"""
Vendor Service - Business Logic Layer
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from marketplace.config import settings
from marketplace.database import unit_of_work
from marketplace.exceptions import ConflictError, VendorNotFoundError
from marketplace.models.vendor import Vendor
from marketplace.repositories.vendor_repository import VendorRepository
from marketplace.schemas.vendor import VendorCreate, VendorResponse, VendorStatusUpdate
from marketplace.security import Principal

logger = logging.getLogger(__name__)


class VendorService:
    """Service layer for vendor registration and approval"""
    
    def __init__(self, db: Session):
        self.db = db
        self.repository = VendorRepository(db)
    
    def apply(self, principal: Principal, vendor_data: VendorCreate) -> VendorResponse:
        """Register the caller as a vendor, pending admin approval"""
        if self.repository.get_by_user(principal.id):
            raise ConflictError("Vendor profile already exists for this user")
        
        vendor = Vendor(
            user_id=principal.id,
            business_name=vendor_data.business_name,
            business_description=vendor_data.business_description,
            contact_email=vendor_data.contact_email,
            status='pending',
            commission_rate=settings.DEFAULT_COMMISSION_RATE,
            is_active=True
        )
        with unit_of_work(self.db):
            self.repository.add(vendor)
        
        logger.info("Vendor application received", extra={'extra_fields': {'vendor_id': vendor.id}})
        return VendorResponse.from_model(vendor)
    
    def get_vendor(self, vendor_id: int) -> VendorResponse:
        vendor = self.repository.get_by_id(vendor_id)
        if vendor is None:
            raise VendorNotFoundError("Vendor not found")
        return VendorResponse.from_model(vendor)
    
    def update_status(self, vendor_id: int, principal: Principal, status_data: VendorStatusUpdate) -> VendorResponse:
        """Approve, reject or suspend a vendor (admin)"""
        vendor = self.repository.get_by_id(vendor_id)
        if vendor is None:
            raise VendorNotFoundError("Vendor not found")
        
        with unit_of_work(self.db):
            vendor.status = status_data.status
            if status_data.status == 'approved':
                vendor.approved_at = datetime.now(timezone.utc)
                vendor.approved_by = principal.id
                vendor.rejection_reason = None
            elif status_data.status == 'rejected':
                vendor.rejection_reason = status_data.rejection_reason
            if status_data.commission_rate is not None:
                vendor.commission_rate = status_data.commission_rate
        
        logger.info(
            "Vendor status updated",
            extra={'extra_fields': {'vendor_id': vendor.id, 'status': vendor.status, 'actor_id': principal.id}}
        )
        return VendorResponse.from_model(vendor)
