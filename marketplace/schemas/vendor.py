"""
Pydantic schemas for vendor request/response validation
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field

from marketplace.schemas.common import CamelModel
from marketplace.schemas.product import Rating

VendorStatus = Literal['pending', 'approved', 'rejected', 'suspended']


class VendorCreate(CamelModel):
    """Schema for a vendor application"""
    business_name: str = Field(..., min_length=1, max_length=100)
    business_description: Optional[str] = Field(None, max_length=1000)
    contact_email: Optional[EmailStr] = None


class VendorStatusUpdate(CamelModel):
    status: VendorStatus
    rejection_reason: Optional[str] = Field(None, max_length=500)
    commission_rate: Optional[float] = Field(None, ge=0, le=100)


class VendorResponse(CamelModel):
    id: int
    user: int
    business_name: str
    business_description: Optional[str] = None
    contact_email: Optional[str] = None
    status: VendorStatus
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    commission_rate: float
    is_active: bool
    rating: Rating
    created_at: datetime
    
    @classmethod
    def from_model(cls, vendor) -> "VendorResponse":
        return cls(
            id=vendor.id,
            user=vendor.user_id,
            business_name=vendor.business_name,
            business_description=vendor.business_description,
            contact_email=vendor.contact_email,
            status=vendor.status,
            approved_at=vendor.approved_at,
            rejection_reason=vendor.rejection_reason,
            commission_rate=float(vendor.commission_rate),
            is_active=vendor.is_active,
            rating=Rating(average=float(vendor.rating_average), count=vendor.rating_count),
            created_at=vendor.created_at
        )


class VendorDetailResponse(CamelModel):
    success: bool = True
    vendor: VendorResponse
