from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from storefront.addresses import service as addresses_service
from storefront.utils.security import require_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/addresses", tags=["Addresses API"])


class AddressIn(BaseModel):
    full_name: str = Field(min_length=1)
    address_line1: str = Field(min_length=1)
    address_line2: Optional[str] = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = "US"
    phone: Optional[str] = None
    special_instructions: Optional[str] = None
    is_default: bool = False


class AddressUpdate(BaseModel):
    full_name: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    special_instructions: Optional[str] = None
    is_default: Optional[bool] = None


# module storefront.addresses.views
@router.get("")
def list_addresses(user: dict = Depends(require_user)):
    """Adresses de l'utilisateur (par défaut d'abord, puis plus récentes)."""
    return {"items": addresses_service.list_addresses(user)}


@router.post("", status_code=201)
def create_address(req: AddressIn, user: dict = Depends(require_user)):
    """Crée une adresse; is_default=true retire d'abord le défaut des autres adresses."""
    return {"item": addresses_service.create_address(user, req.model_dump())}


@router.put("/{address_id}")
def update_address(address_id: str, req: AddressUpdate, user: dict = Depends(require_user)):
    return {"item": addresses_service.update_address(user, address_id, req.model_dump(exclude_unset=True))}


@router.post("/{address_id}/default")
def set_default_address(address_id: str, user: dict = Depends(require_user)):
    return {"item": addresses_service.set_default_address(user, address_id)}


@router.delete("/{address_id}")
def delete_address(address_id: str, user: dict = Depends(require_user)):
    if not addresses_service.delete_address(user, address_id):
        raise HTTPException(status_code=400, detail="Failed to delete address")
    return {"ok": True}
