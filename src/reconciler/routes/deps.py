from __future__ import annotations

from fastapi import Request

from ..repository.contacts import ContactStore
from ..services.identify import IdentifyService


def get_store(request: Request) -> ContactStore:
    return request.app.state.store


def get_identify_service(request: Request) -> IdentifyService:
    return request.app.state.identify_service


__all__ = ["get_identify_service", "get_store"]
