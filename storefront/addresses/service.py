"""Cas d'usage 'addresses'.
Invariant: au plus une adresse is_default=True par utilisateur. Maintenu par
l'application (pas par la base): on efface les autres défauts avant d'en poser un.
"""
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from storefront.addresses import repository

ADDRESS_FIELDS = (
    "full_name",
    "address_line1",
    "address_line2",
    "city",
    "state",
    "postal_code",
    "country",
    "phone",
    "special_instructions",
)


def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: data[k] for k in ADDRESS_FIELDS if k in data}


def list_addresses(user: Dict[str, Any]) -> List[dict]:
    return repository.list_addresses(user["token"], user["id"])


def create_address(user: Dict[str, Any], data: Dict[str, Any]) -> dict:
    is_default = bool(data.get("is_default"))
    if is_default:
        repository.clear_defaults(user["token"], user["id"])
    row = repository.insert_address(user["token"], {**_clean(data), "user_id": user["id"], "is_default": is_default})
    if not row:
        raise HTTPException(status_code=500, detail="Failed to save address")
    return row


def update_address(user: Dict[str, Any], address_id: str, data: Dict[str, Any]) -> dict:
    updates = _clean(data)
    if "is_default" in data:
        if data.get("is_default"):
            # Adresse vérifiée avant d'effacer le défaut des autres
            if not repository.get_address(user["token"], user["id"], address_id):
                raise HTTPException(status_code=404, detail="Address not found")
            repository.clear_defaults(user["token"], user["id"])
        updates["is_default"] = bool(data.get("is_default"))
    row = repository.update_address(user["token"], user["id"], address_id, updates)
    if not row:
        raise HTTPException(status_code=404, detail="Address not found")
    return row


def set_default_address(user: Dict[str, Any], address_id: str) -> dict:
    if not repository.get_address(user["token"], user["id"], address_id):
        raise HTTPException(status_code=404, detail="Address not found")
    repository.clear_defaults(user["token"], user["id"])
    row = repository.update_address(user["token"], user["id"], address_id, {"is_default": True})
    if not row:
        raise HTTPException(status_code=500, detail="Failed to update address")
    return row


def delete_address(user: Dict[str, Any], address_id: str) -> bool:
    return repository.delete_address(user["token"], user["id"], address_id)


def get_address(user: Dict[str, Any], address_id: str) -> Optional[dict]:
    return repository.get_address(user["token"], user["id"], address_id)
