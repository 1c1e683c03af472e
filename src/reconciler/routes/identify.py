from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from shared.logging import get_logger

from ..errors import InvalidInputError
from ..models import IdentifyRequest, IdentifyResponse
from ..services.identify import IdentifyService
from .deps import get_identify_service

logger = get_logger("reconciler.routes.identify")

router = APIRouter(tags=["identify"])


@router.post("/identify", response_model=IdentifyResponse)
def identify(
    payload: IdentifyRequest,
    service: IdentifyService = Depends(get_identify_service),
) -> IdentifyResponse:
    try:
        return service.identify(payload)
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("identify_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc


__all__ = ["router"]
