# backend/tutorhub/booking_flow/http_gateway.py
"""httpx client for the booking store's v1 API."""

from __future__ import annotations

from datetime import date, datetime
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, cast

import httpx

from ..core.config import settings
from .gateway import FailureKind, GatewayError, classify_failure
from .models import AvailabilityWindow, PaymentSubmission, StagedReceipt

logger = logging.getLogger(__name__)


def _error_fields(payload: Any) -> Tuple[Optional[str], Optional[str]]:
    """Pull (message, code) out of a problem+json or ``{"error": ...}`` body."""
    if not isinstance(payload, dict):
        return (payload if isinstance(payload, str) and payload else None), None
    message = payload.get("detail") or payload.get("message") or payload.get("error")
    code = payload.get("code")
    if isinstance(message, dict):
        code = code or message.get("code")
        message = message.get("message")
    return (message if isinstance(message, str) else None), (
        code if isinstance(code, str) else None
    )


def _required_field(payload: Any, key: str, method: str, path: str) -> str:
    """``payload[key]`` from a 2xx body, or a SERVER failure when the body lacks it."""
    value = payload.get(key) if isinstance(payload, dict) else None
    if value is None or value == "":
        logger.warning(
            "Booking store answered %s %s without %s", method, path, key, extra={"payload": payload}
        )
        raise GatewayError(
            "Received malformed response from the booking service",
            FailureKind.SERVER,
            payload=payload,
        )
    return str(value)


class HttpBookingGateway:
    """
    Booking store over HTTP.

    Each call is attempted once and bounded by ``timeout``. Retrying is
    the user's decision.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.api_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    async def list_availability(self, teacher_id: str) -> List[AvailabilityWindow]:
        path = f"/teachers/{teacher_id}/availability"
        payload = await self.request("GET", path)
        if not isinstance(payload, list):
            logger.warning("Booking store answered GET %s with a non-list body", path)
            raise GatewayError(
                "Received malformed response from the booking service",
                FailureKind.SERVER,
                payload=payload,
            )
        return [AvailabilityWindow.from_api(item) for item in cast(List[Dict[str, Any]], payload)]

    async def probe_slot(self, teacher_id: str, on_date: date, time_slot: str) -> Mapping[str, Any]:
        payload = await self.request(
            "POST",
            "/bookings/check-availability",
            json_body={
                "teacher_id": teacher_id,
                "date": on_date.isoformat(),
                "time_slot": time_slot,
            },
        )
        return cast(Mapping[str, Any], payload)

    async def create_booking(
        self, teacher_id: str, student_id: str, start_time: datetime, end_time: datetime
    ) -> str:
        payload = await self.request(
            "POST",
            "/bookings",
            json_body={
                "teacher_id": teacher_id,
                "student_id": student_id,
                "start_time": start_time.isoformat(),
                "end_time": end_time.isoformat(),
            },
        )
        return _required_field(payload, "booking_id", "POST", "/bookings")

    async def upload_receipt(self, receipt: StagedReceipt) -> str:
        payload = await self.request(
            "POST",
            "/uploads/receipt",
            files={"file": (receipt.file_name, receipt.data, receipt.content_type)},
        )
        return _required_field(payload, "url", "POST", "/uploads/receipt")

    async def submit_payment(
        self,
        submission: PaymentSubmission,
        *,
        student_id: str,
        student_email: Optional[str] = None,
    ) -> str:
        body = {**submission.to_payload(), "student_id": student_id}
        if student_email:
            body["student_email"] = student_email
        payload = await self.request("POST", "/payments", json_body=body)
        return _required_field(payload, "payment_id", "POST", "/payments")

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Dict[str, Any] | None = None,
        files: Dict[str, Any] | None = None,
    ) -> Any:
        """Perform one API call and return the parsed JSON payload."""

        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        ) as client:
            try:
                response = await client.request(method, path, json=json_body, files=files)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                try:
                    error_payload: Any = exc.response.json()
                except json.JSONDecodeError:
                    error_payload = exc.response.text
                message, code = _error_fields(error_payload)
                kind = classify_failure(status, code, message)
                log = logger.info if kind == FailureKind.CONFLICT else logger.warning
                log(
                    "Booking store responded %s for %s %s: %s",
                    status,
                    method,
                    path,
                    message,
                    extra={"status_code": status, "code": code},
                )
                raise GatewayError(
                    message or f"Booking store responded with status {status}",
                    kind,
                    status_code=status,
                    code=code,
                    payload=error_payload,
                ) from exc
            except httpx.TimeoutException as exc:
                logger.warning("Booking store timed out for %s %s", method, path)
                raise GatewayError(
                    "The booking service did not respond in time. Please try again.",
                    FailureKind.NETWORK,
                ) from exc
            except httpx.RequestError as exc:
                logger.warning("Booking store unreachable for %s %s: %s", method, path, exc)
                raise GatewayError(
                    "Could not reach the booking service. Please check your connection.",
                    FailureKind.NETWORK,
                ) from exc

        try:
            return response.json()
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from booking store for %s %s", method, path)
            raise GatewayError(
                "Received malformed response from the booking service",
                FailureKind.SERVER,
                status_code=response.status_code,
            ) from exc
