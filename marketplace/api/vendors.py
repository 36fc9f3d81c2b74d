"""
Vendor API endpoints
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from marketplace.api.deps import get_current_principal, require_roles
from marketplace.database import get_db
from marketplace.schemas.vendor import VendorCreate, VendorDetailResponse, VendorStatusUpdate
from marketplace.security import Principal
from marketplace.services.vendor_service import VendorService

router = APIRouter(prefix="/vendors", tags=["vendors"])


def get_vendor_service(db: Session = Depends(get_db)) -> VendorService:
    return VendorService(db)


@router.post("", response_model=VendorDetailResponse, status_code=status.HTTP_201_CREATED, summary="Apply as vendor")
def apply_vendor(
    vendor_data: VendorCreate,
    principal: Principal = Depends(get_current_principal),
    service: VendorService = Depends(get_vendor_service)
):
    return VendorDetailResponse(vendor=service.apply(principal, vendor_data))


@router.get("/{vendor_id}", response_model=VendorDetailResponse, summary="Get vendor by ID")
def get_vendor(
    vendor_id: int,
    service: VendorService = Depends(get_vendor_service)
):
    return VendorDetailResponse(vendor=service.get_vendor(vendor_id))


@router.put("/{vendor_id}/status", response_model=VendorDetailResponse, summary="Update vendor status")
def update_vendor_status(
    vendor_id: int,
    status_data: VendorStatusUpdate,
    principal: Principal = Depends(require_roles("admin")),
    service: VendorService = Depends(get_vendor_service)
):
    """Approve, reject or suspend a vendor (admin only)"""
    return VendorDetailResponse(vendor=service.update_status(vendor_id, principal, status_data))
