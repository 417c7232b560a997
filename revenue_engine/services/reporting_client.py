"""HTTP client wrapper for the revenue reporting API."""
from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from revenue_engine.core.config import Settings
from revenue_engine.core.errors import FetchError
from revenue_engine.schemas.filters import QueryDescriptor
from revenue_engine.schemas.report import ReportSnapshot

logger = logging.getLogger(__name__)


def _unwrap(document: Any) -> dict[str, Any]:
    if not isinstance(document, dict):
        raise FetchError("malformed response: expected a JSON object")
    # The dashboard endpoint wraps its payload as {"success": ..., "data": {...}}.
    if "data" in document and ("success" in document or len(document) == 1):
        document = document["data"]
        if document is None:
            return {}
        if not isinstance(document, dict):
            raise FetchError("malformed response: 'data' is not an object")
    return document


class ReportingApiClient:
    """Synchronous wrapper around ``GET /reports/revenue``."""

    def __init__(
        self,
        base_url: str,
        *,
        path: str = "/reports/revenue",
        client: httpx.Client | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._path = "/" + path.lstrip("/")
        self._client = client or httpx.Client(headers=headers)
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings: Settings, *, client: httpx.Client | None = None) -> "ReportingApiClient":
        return cls(settings.reporting_api_url, path=settings.reporting_api_path, client=client)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ReportingApiClient":  # pragma: no cover - convenience
        return self

    def __exit__(self, *_args: object) -> None:  # pragma: no cover - convenience
        self.close()

    def fetch_snapshot(self, descriptor: QueryDescriptor, *, timeout: float | None = 10.0) -> ReportSnapshot:
        """Fetch and parse one report snapshot; any failure surfaces as ``FetchError``."""

        try:
            response = self._client.get(
                f"{self._base_url}{self._path}",
                params=descriptor.to_params(),
                timeout=timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            raise FetchError(_error_message(exc.response), status_code=status_code) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"reporting API unreachable: {exc}") from exc

        try:
            document = response.json()
        except ValueError as exc:
            raise FetchError("malformed response: body is not valid JSON", status_code=response.status_code) from exc

        payload = _unwrap(document)
        try:
            return ReportSnapshot.model_validate(payload)
        except PydanticValidationError as exc:
            logger.debug("snapshot validation failed: %s", exc)
            raise FetchError(
                f"malformed response: {exc.error_count()} invalid field(s)",
                status_code=response.status_code,
            ) from exc


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"reporting API returned HTTP {response.status_code}"


__all__ = ["ReportingApiClient"]
