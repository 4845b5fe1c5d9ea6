"""
Typed HTTP client for the school API, used by the portal-side flows
(schedule editing, attendance marking, list polling).
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from schoolms.core.config import settings
from schoolms.core.exceptions import DuplicateRemoteError, TransientRemoteError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Backend message verbatim: `detail` (string or structured), else `message`."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, dict) and detail.get("message"):
            return detail["message"]
        if isinstance(detail, str):
            return detail
        if detail:
            return str(detail)
        if body.get("message"):
            return body["message"]
    return f"HTTP {response.status_code}"


class SchoolApiClient:
    """Async client over httpx. Pass `transport` to talk to an in-process app."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.client_timeout_seconds,
            transport=transport,
            headers=headers,
        )

    async def __aenter__(self) -> "SchoolApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, duplicate_on_conflict: bool = False, **kwargs) -> Dict[str, Any]:
        response = await self._client.request(method, url, **kwargs)
        if response.is_success:
            return response.json()
        message = _error_message(response)
        payload = None
        try:
            payload = response.json()
        except ValueError:
            pass
        if duplicate_on_conflict and response.status_code == httpx.codes.CONFLICT:
            raise DuplicateRemoteError(message, response.status_code, payload)
        logger.debug("%s %s failed with %s: %s", method, url, response.status_code, message)
        raise TransientRemoteError(message, response.status_code, payload)

    # Subjects

    async def list_subjects(self, **params: Any) -> List[Dict[str, Any]]:
        body = await self._request("GET", "/subjects", params=params or None)
        return body["data"]["subjects"]

    async def get_subject(self, identifier: str) -> Dict[str, Any]:
        body = await self._request("GET", f"/subjects/{identifier}")
        return body["data"]["subject"]

    async def update_subject(self, identifier: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """PUT the subject. A `schedule` key replaces the whole schedule."""
        body = await self._request("PUT", f"/subjects/{identifier}", json=changes)
        return body["data"]["subject"]

    # Master data

    async def list_rooms(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"type": "room"}
        if status:
            params["status"] = status
        body = await self._request("GET", "/master-data", params=params)
        return body["data"]["master_data"]

    # Teachers

    async def list_teachers(self, **params: Any) -> List[Dict[str, Any]]:
        body = await self._request("GET", "/teachers", params=params or None)
        return body["data"]["teachers"]

    # Students / classes

    async def list_students(self, class_name: Optional[str] = None, section: Optional[str] = None, **params: Any) -> List[Dict[str, Any]]:
        if class_name:
            params["class"] = class_name
        if section:
            params["section"] = section
        body = await self._request("GET", "/students", params=params or None)
        return body["data"]["students"]

    async def list_classes(self, **params: Any) -> List[Dict[str, Any]]:
        body = await self._request("GET", "/classes", params=params or None)
        return body["data"]["classes"]

    # Attendance

    async def find_attendance(self, class_name: str, on: date) -> Optional[Dict[str, Any]]:
        """The attendance document for exactly (class, date), or None."""
        body = await self._request(
            "GET", "/attendance", params={"class": class_name, "date": on.isoformat()}
        )
        documents = body["data"]["attendance"]
        return documents[0] if documents else None

    async def create_attendance(self, class_name: str, on: date, students: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Raises DuplicateRemoteError when (class, date) already has a document."""
        body = await self._request(
            "POST",
            "/attendance",
            duplicate_on_conflict=True,
            json={"class_name": class_name, "date": on.isoformat(), "students": students},
        )
        return body["data"]["attendance"]

    async def update_attendance(self, document_id: str, students: List[Dict[str, Any]]) -> Dict[str, Any]:
        body = await self._request("PUT", f"/attendance/{document_id}", json={"students": students})
        return body["data"]["attendance"]

    async def get_collection(self, path: str, key: str, **params: Any) -> List[Dict[str, Any]]:
        """Any list endpoint, e.g. get_collection('/teachers', 'teachers')."""
        body = await self._request("GET", path, params=params or None)
        return body["data"][key]
