from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from ..models import Contact
from ..repository.contacts import ContactStore
from .deps import get_store

router = APIRouter(prefix="/v1/contacts", tags=["contacts"])


@router.get("", response_model=List[Contact])
def list_contacts(store: ContactStore = Depends(get_store)) -> List[Contact]:
    with store.transaction() as repo:
        return repo.list_all()


__all__ = ["router"]
