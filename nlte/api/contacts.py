from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.contacts import DuplicateContactError, InvalidContactError
from ..services.engine import NLTEService, get_nlte_service
from ..types import ContactCreateRequest

router = APIRouter(prefix="/contacts")

# Sync routes: the store blocks on file I/O.


@router.get("")
def list_contacts(
    address: str = Query(..., description="Wallet address owning the contacts"),
    service: NLTEService = Depends(get_nlte_service),
) -> List[Dict[str, Any]]:
    return [c.to_dict() for c in service.contacts.list(address)]


@router.post("", status_code=201)
def add_contact(req: ContactCreateRequest, service: NLTEService = Depends(get_nlte_service)) -> Dict[str, Any]:
    try:
        contact = service.contacts.add(req.user_address, req.name, req.address)
    except InvalidContactError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except DuplicateContactError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return contact.to_dict()


@router.delete("/{contact_id}")
def remove_contact(
    contact_id: str,
    address: str = Query(..., description="Wallet address owning the contacts"),
    service: NLTEService = Depends(get_nlte_service),
) -> Dict[str, Any]:
    if not service.contacts.remove(address, contact_id):
        raise HTTPException(status_code=404, detail="Contact not found")
    return {"success": True, "id": contact_id}
