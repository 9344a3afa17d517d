"""In-memory stand-ins for the shared aiohttp session used by provider clients."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Any, NamedTuple, Self

if TYPE_CHECKING:
    from collections.abc import Iterable
    from types import TracebackType


class FakeResponse:
    """Scripted provider reply; usable as ``async with session.get(...)``."""

    def __init__(
        self,
        status: int = 200,
        json_data: Any = None,
        text_data: str = "",
        headers: dict[str, str] | None = None,
        url: str = "http://provider.test",
    ) -> None:
        self.status = status
        self.json_data = json_data
        self.text_data = text_data
        self.headers = headers or {}
        self.url = url

    async def json(self, **_: Any) -> Any:
        if isinstance(self.json_data, Exception):
            raise self.json_data
        return self.json_data

    async def text(self) -> str:
        return self.text_data

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        return False


class RecordedRequest(NamedTuple):
    method: str
    url: str
    kwargs: dict[str, Any]

    @property
    def params(self) -> dict[str, Any]:
        return self.kwargs.get("params") or {}

    @property
    def headers(self) -> dict[str, str]:
        return self.kwargs.get("headers") or {}


class FakeSession:
    """Replays queued responses per HTTP method and records every call."""

    def __init__(
        self,
        *,
        get_responses: Iterable[FakeResponse | Exception] = (),
        post_responses: Iterable[FakeResponse | Exception] = (),
    ) -> None:
        self._queues = {
            "GET": deque(get_responses),
            "POST": deque(post_responses),
        }
        self.requests: list[RecordedRequest] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._dispatch("GET", url, kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._dispatch("POST", url, kwargs)

    def params(self, index: int = -1) -> dict[str, Any]:
        return self.requests[index].params

    def headers(self, index: int = -1) -> dict[str, str]:
        return self.requests[index].headers

    def _dispatch(self, method: str, url: str, kwargs: dict[str, Any]) -> FakeResponse:
        self.requests.append(RecordedRequest(method, url, kwargs))
        queue = self._queues[method]
        if not queue:
            msg = f"Unexpected {method} {url}: no scripted responses left"
            raise AssertionError(msg)
        scripted = queue.popleft()
        if isinstance(scripted, Exception):
            raise scripted
        return scripted
