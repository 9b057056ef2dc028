"""Async HTTP client for the task API.

Implements the task and attachment sources the board controller expects, and
maps error responses back to ``ApiError`` subclasses.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

import httpx

from duetasks.config import settings
from duetasks.schemas.board import BoardResponse, FilterState, PageState
from duetasks.schemas.task import SeedRequest, TaskCreate, TaskResponse, TaskUpdate
from duetasks.services.attachment_service import IncomingFile

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error envelope returned by the API."""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None, extra: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.extra = extra


class UnauthorizedApiError(ApiError):
    pass


class BadRequestApiError(ApiError):
    pass


class NotFoundApiError(ApiError):
    pass


class StorageApiError(ApiError):
    pass


class PersistenceApiError(ApiError):
    pass


ERRORS_BY_CODE = {
    "UNAUTHORIZED": UnauthorizedApiError,
    "BAD_REQUEST": BadRequestApiError,
    "NOT_FOUND": NotFoundApiError,
    "STORAGE": StorageApiError,
    "DB": PersistenceApiError,
}

ERRORS_BY_STATUS = {
    401: UnauthorizedApiError,
    400: BadRequestApiError,
    422: BadRequestApiError,
    404: NotFoundApiError,
    502: StorageApiError,
    500: PersistenceApiError,
}


def error_from_response(response: httpx.Response) -> ApiError:
    """Build the ApiError subclass matching an error response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    detail = body.get("detail") if isinstance(body, dict) else None
    code: Optional[str] = None
    extra: Any = None
    if isinstance(detail, dict):
        code = detail.get("code")
        message = detail.get("message") or response.reason_phrase
    elif isinstance(detail, list):
        # request validation errors
        code = "VALIDATION"
        extra = detail
        message = "; ".join(str(item.get("msg", item)) for item in detail if isinstance(item, dict)) or "Invalid request."
    elif isinstance(detail, str):
        message = detail
    else:
        message = "Unexpected response from server."

    error_cls = ERRORS_BY_CODE.get(code) or ERRORS_BY_STATUS.get(response.status_code, ApiError)
    return error_cls(message, code=code, status_code=response.status_code, extra=extra)


class ApiClient:
    """Task and attachment source backed by the HTTP API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}{settings.API_V1_PREFIX}",
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, url, headers=self._build_headers(), **kwargs)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError(f"Network error: {exc}") from exc
        if response.is_error:
            raise error_from_response(response)
        return response.json()

    # Auth

    async def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        return await self._request("POST", "/auth/sign-up", json={"email": email, "password": password})

    async def login(self, email: str, password: str) -> str:
        """Exchange credentials for an access token and keep it for later calls."""
        data = await self._request("POST", "/auth/login", data={"username": email, "password": password})
        self.token = data["access_token"]
        return self.token

    async def me(self) -> Dict[str, Any]:
        return await self._request("GET", "/auth/me")

    # Task source

    async def list_tasks(self) -> Tuple[List[TaskResponse], Optional[UUID]]:
        data = await self._request("GET", "/tasks")
        tasks = [TaskResponse.model_validate(item) for item in data["tasks"]]
        in_progress = data.get("in_progress_task_id")
        return tasks, UUID(in_progress) if in_progress else None

    async def create_task(self, task_in: TaskCreate) -> Tuple[TaskResponse, int]:
        data = await self._request("POST", "/tasks", json=task_in.model_dump())
        return TaskResponse.model_validate(data["task"]), data.get("conflict_count", 0)

    async def update_task(self, task_id: UUID, patch: TaskUpdate) -> None:
        await self._request("PATCH", f"/tasks/{task_id}", json=patch.model_dump(exclude_unset=True))

    async def delete_task(self, task_id: UUID) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")

    async def clear_completed(self) -> int:
        data = await self._request("POST", "/tasks/clear-completed")
        return data.get("deleted") or 0

    async def set_in_progress(self, task_id: Optional[UUID]) -> Optional[UUID]:
        data = await self._request(
            "POST",
            "/tasks/in-progress",
            json={"id": str(task_id) if task_id else None},
        )
        confirmed = data.get("in_progress_task_id")
        return UUID(confirmed) if confirmed else None

    async def seed_tasks(self, seed: SeedRequest) -> List[TaskResponse]:
        data = await self._request("POST", "/tasks/seed", json=seed.model_dump())
        return [TaskResponse.model_validate(item) for item in data["tasks"]]

    # Attachment source

    async def upload_attachments(self, task_id: UUID, files: Sequence[IncomingFile]) -> TaskResponse:
        multipart = [("files", (f.name, f.stream, f.content_type or "application/octet-stream")) for f in files]
        data = await self._request("POST", f"/tasks/{task_id}/attachments", files=multipart)
        return TaskResponse.model_validate(data["task"])

    async def delete_attachment(self, task_id: UUID, attachment_id: str) -> TaskResponse:
        data = await self._request(
            "POST",
            f"/tasks/{task_id}/attachments/delete",
            json={"attachment_id": attachment_id},
        )
        return TaskResponse.model_validate(data["task"])

    async def signed_url(self, bucket: str, path: str) -> str:
        data = await self._request("POST", "/attachments/signed-url", json={"bucket": bucket, "path": path})
        return data["signed_url"]

    # Board view

    async def get_board(
        self,
        filter_state: Optional[FilterState] = None,
        page_state: Optional[PageState] = None,
    ) -> BoardResponse:
        params: Dict[str, Any] = {}
        if filter_state is not None:
            params.update(filter_state.model_dump(exclude_none=True))
        if page_state is not None:
            params.update(page_state.model_dump())
        if isinstance(params.get("focus"), bool):
            params["focus"] = str(params["focus"]).lower()
        data = await self._request("GET", "/board", params=params)
        return BoardResponse.model_validate(data)
