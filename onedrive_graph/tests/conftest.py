"""
OneDrive 클라이언트 테스트 공통 Fixtures

FakeClientSession은 aiohttp.ClientSession.request 를 대신하여
요청을 기록하고 미리 준비한 응답(또는 handler 결과)을 돌려준다.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from onedrive_graph.config import OneDriveSettings
from onedrive_graph.graph_onedrive_client import GraphOneDriveClient


class FakeStream:
    def __init__(self, body: bytes):
        self._body = body

    async def iter_chunked(self, n: int):
        for offset in range(0, len(self._body), n):
            yield self._body[offset:offset + n]


class FakeResponse:
    """aiohttp ClientResponse 대용 (async context manager)"""

    def __init__(
        self,
        status: int = 200,
        json_data: Any = None,
        text: Optional[str] = None,
        body: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
    ):
        self.status = status
        self._json_data = json_data
        self._text = text
        self._body = body
        self.headers = headers or {}
        self.content = FakeStream(body)

    async def json(self, content_type: Optional[str] = "application/json"):
        if self._json_data is None and self._text:
            return json.loads(self._text)
        return self._json_data

    async def text(self) -> str:
        if self._text is not None:
            return self._text
        if self._json_data is not None:
            return json.dumps(self._json_data)
        return self._body.decode("utf-8", errors="replace")

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


@dataclass
class RecordedRequest:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    json: Any = None
    data: Optional[bytes] = None


class FakeClientSession:
    """요청 기록 + 응답 큐 / handler"""

    def __init__(
        self,
        responses: Optional[List[Any]] = None,
        handler: Optional[Callable[[RecordedRequest], Any]] = None,
    ):
        self.calls: List[RecordedRequest] = []
        self._responses = list(responses or [])
        self._handler = handler
        self.closed = False

    def request(self, method, url, headers=None, json=None, data=None, timeout=None, **kwargs):
        recorded = RecordedRequest(method, url, dict(headers or {}), json, data)
        self.calls.append(recorded)
        if self._handler is not None:
            result = self._handler(recorded)
        else:
            assert self._responses, f"unexpected request: {method} {url}"
            result = self._responses.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result

    async def close(self):
        self.closed = True


@pytest.fixture
def settings():
    """환경변수 / .env 영향을 받지 않는 설정"""
    return OneDriveSettings(load_env=False)


@pytest.fixture
def token_provider():
    provider = AsyncMock()
    provider.validate_and_refresh_token = AsyncMock(return_value="test-token")
    return provider


@pytest.fixture
def make_client(settings, token_provider):
    """FakeClientSession을 주입한 클라이언트 생성기"""

    def _make(responses=None, handler=None, client_settings=None):
        session = FakeClientSession(responses=responses, handler=handler)
        client = GraphOneDriveClient(
            token_provider=token_provider,
            settings=client_settings or settings,
            session=session,
        )
        return client, session

    return _make


@pytest.fixture
def drive_item_data():
    """driveItem 응답"""
    return {
        "id": "01BYE5RZ5MYLM2QQXHRBF3ZTPJX2VH7JLN",
        "name": "report.docx",
        "size": 1024,
        "eTag": "\"{ABC},1\"",
        "createdDateTime": "2025-01-09T10:30:00Z",
        "lastModifiedDateTime": "2025-01-09T10:31:00Z",
        "webUrl": "https://onedrive.live.com/redir?resid=ABC",
        "file": {
            "mimeType": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "hashes": {"quickXorHash": "xor=="},
        },
        "parentReference": {
            "driveId": "b!drive",
            "id": "01BYE5RZ6PARENT",
            "path": "/drive/root:/Documents",
        },
    }


@pytest.fixture
def folder_item_data():
    return {
        "id": "01BYE5RZFOLDER",
        "name": "Photos",
        "folder": {"childCount": 3},
        "parentReference": {"id": "root"},
    }


@pytest.fixture
def upload_session_response():
    """OneDrive Upload Session 생성 응답"""
    return {
        "uploadUrl": "https://sn3302.up.1drv.com/up/fe6987415ace7X4e1eF866337",
        "expirationDateTime": "2025-01-10T10:00:00Z",
        "nextExpectedRanges": ["0-"],
    }


@pytest.fixture
def upload_complete_response():
    """OneDrive 업로드 완료 응답"""
    return {
        "id": "01BYE5RZ5UPLOADED",
        "name": "large.bin",
        "size": 1000000,
        "file": {"mimeType": "application/octet-stream"},
        "webUrl": "https://onedrive.live.com/redir?resid=UPLOADED",
    }
