from __future__ import annotations

from typing import Optional

import httpx

from ..models import IdentifyRequest, IdentifyResponse


class IdentityServiceClient:
    """Lightweight SDK for calling the identity reconciliation service."""

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", "Accept": "application/json"}

    @staticmethod
    def _payload(email: Optional[str], phone_number: Optional[str]) -> dict[str, object]:
        request = IdentifyRequest(email=email, phone_number=phone_number)
        return request.model_dump(mode="json", by_alias=True, exclude_none=True)

    def identify(self, email: Optional[str] = None, phone_number: Optional[str] = None) -> IdentifyResponse:
        response = httpx.post(
            f"{self._base_url}/identify",
            json=self._payload(email, phone_number),
            headers=self._headers(),
            timeout=self._timeout,
        )
        response.raise_for_status()
        return IdentifyResponse.model_validate(response.json())

    def health(self) -> dict[str, str]:
        response = httpx.get(
            f"{self._base_url}/v1/healthz",
            headers=self._headers(),
            timeout=self._timeout,
        )
        response.raise_for_status()
        return response.json()

    async def aidentify(
        self,
        email: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> IdentifyResponse:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                f"{self._base_url}/identify",
                json=self._payload(email, phone_number),
                headers=self._headers(),
            )
        response.raise_for_status()
        return IdentifyResponse.model_validate(response.json())


__all__ = ["IdentityServiceClient"]
