"""
Upload Session Tests
createUploadSession 요청, 청크 PUT 헤더, 대용량 업로드 전체 흐름 검증
"""

import pytest

from onedrive_graph.chunked_upload import UPLOAD_ALIGNMENT
from onedrive_graph.config import OneDriveSettings
from onedrive_graph.onedrive_errors import (
    ChunkTransferError,
    FragmentSizeError,
    PayloadValidationError,
    SessionCreationError,
)
from onedrive_graph.onedrive_types import ConflictBehavior
from onedrive_graph.upload_types import UploadItemInfo

from .conftest import FakeResponse

BASE = "https://graph.microsoft.com/v1.0"
KIB_320 = UPLOAD_ALIGNMENT


def upload_handler(session_response, complete_response, fail_range=None):
    """createUploadSession POST -> 세션, 청크 PUT -> 202 / 마지막 201"""

    def _handle(request):
        if request.method == "POST":
            return FakeResponse(200, session_response)
        content_range = request.headers["Content-Range"]
        span, total = content_range[len("bytes "):].split("/")
        start, end = (int(v) for v in span.split("-"))
        if fail_range == (start, end):
            return FakeResponse(500, {"error": {"code": "generalException", "message": "boom"}})
        if end == int(total) - 1:
            return FakeResponse(201, complete_response)
        return FakeResponse(202, {"nextExpectedRanges": [f"{end + 1}-"]})

    return _handle


class TestCreateUploadSession:
    """Upload Session 생성 테스트"""

    @pytest.mark.asyncio
    async def test_request_by_path(self, make_client, upload_session_response):
        client, session = make_client([FakeResponse(200, upload_session_response)])
        item_info = UploadItemInfo(file_size=1_000_000, conflict_behavior=ConflictBehavior.RENAME, name="large.bin")

        upload_session = await client.create_upload_session(
            "test@example.com", item_info, file_path="Documents/large.bin"
        )

        call = session.calls[0]
        assert call.method == "POST"
        assert call.url == f"{BASE}/me/drive/root:/Documents/large.bin:/createUploadSession"
        assert call.json == {
            "item": {
                "@microsoft.graph.conflictBehavior": "rename",
                "fileSize": 1_000_000,
                "name": "large.bin",
            }
        }
        assert call.headers["Authorization"] == "Bearer test-token"
        assert upload_session.upload_url == upload_session_response["uploadUrl"]
        assert upload_session.expiration_date_time is not None

    @pytest.mark.asyncio
    async def test_request_by_parent(self, make_client, upload_session_response):
        client, session = make_client([FakeResponse(200, upload_session_response)])
        item_info = UploadItemInfo(file_size=10, name="big file.bin")

        await client.create_upload_session("test@example.com", item_info, parent_id="P1")

        assert session.calls[0].url == f"{BASE}/me/drive/items/P1:/big%20file.bin:/createUploadSession"

    @pytest.mark.asyncio
    async def test_rejected(self, make_client):
        error_body = {"error": {"code": "nameAlreadyExists", "message": "An item with the same name exists"}}
        client, _ = make_client([FakeResponse(409, error_body)])

        with pytest.raises(SessionCreationError) as exc_info:
            await client.create_upload_session(
                "test@example.com", UploadItemInfo(file_size=10), file_path="a.bin"
            )

        assert exc_info.value.status == 409
        assert exc_info.value.code == "nameAlreadyExists"

    @pytest.mark.asyncio
    async def test_missing_upload_url(self, make_client):
        client, _ = make_client([FakeResponse(200, {"expirationDateTime": "2025-01-10T10:00:00Z"})])

        with pytest.raises(SessionCreationError):
            await client.create_upload_session(
                "test@example.com", UploadItemInfo(file_size=10), file_path="a.bin"
            )

    @pytest.mark.asyncio
    async def test_missing_target(self, make_client):
        client, session = make_client([])

        with pytest.raises(SessionCreationError):
            await client.create_upload_session("test@example.com", UploadItemInfo(file_size=10))

        assert session.calls == []


class TestTransferRange:
    """청크 PUT 테스트"""

    UPLOAD_URL = "https://sn3302.up.1drv.com/up/session"

    @pytest.mark.asyncio
    async def test_headers(self, make_client):
        client, session = make_client([FakeResponse(202, {"nextExpectedRanges": ["327680-"]})])

        body = await client.transfer_range(self.UPLOAD_URL, b"x" * KIB_320, 0, KIB_320 - 1, 1_000_000)

        call = session.calls[0]
        assert call.method == "PUT"
        assert call.url == self.UPLOAD_URL
        assert call.headers == {
            "Content-Length": str(KIB_320),
            "Content-Range": "bytes 0-327679/1000000",
        }
        assert "Authorization" not in call.headers
        assert body["nextExpectedRanges"] == ["327680-"]

    @pytest.mark.asyncio
    async def test_failure_carries_range(self, make_client):
        client, _ = make_client([FakeResponse(416, {"error": {"code": "invalidRange", "message": "bad range"}})])

        with pytest.raises(ChunkTransferError) as exc_info:
            await client.transfer_range(self.UPLOAD_URL, b"abc", 10, 12, 100)

        error = exc_info.value
        assert error.byte_range == (10, 12)
        assert error.file_size == 100
        assert error.status == 416
        assert error.code == "invalidRange"

    @pytest.mark.asyncio
    async def test_retry_same_range_is_identical(self, make_client):
        """호출자 재시도 시 동일한 범위/헤더로 전송"""
        client, session = make_client([
            FakeResponse(503, text="unavailable"),
            FakeResponse(202, {"nextExpectedRanges": ["3-"]}),
        ])

        with pytest.raises(ChunkTransferError):
            await client.transfer_range(self.UPLOAD_URL, b"abc", 0, 2, 10)
        await client.transfer_range(self.UPLOAD_URL, b"abc", 0, 2, 10)

        assert session.calls[0].headers == session.calls[1].headers
        assert session.calls[0].data == session.calls[1].data

    @pytest.mark.asyncio
    async def test_length_mismatch(self, make_client):
        client, session = make_client([])

        with pytest.raises(ValueError):
            await client.transfer_range(self.UPLOAD_URL, b"abc", 0, 9, 10)

        assert session.calls == []

    @pytest.mark.asyncio
    async def test_session_status(self, make_client):
        client, session = make_client([FakeResponse(200, {
            "expirationDateTime": "2025-01-10T10:00:00Z",
            "nextExpectedRanges": ["655360-"],
        })])

        status = await client.get_upload_session_status(self.UPLOAD_URL)

        assert status.next_expected_offset == 655360
        assert "Authorization" not in session.calls[0].headers

    @pytest.mark.asyncio
    async def test_cancel_session(self, make_client):
        client, session = make_client([FakeResponse(204)])

        await client.cancel_upload_session(self.UPLOAD_URL)

        assert session.calls[0].method == "DELETE"
        assert session.calls[0].url == self.UPLOAD_URL


class TestUploadLargeFile:
    """Upload Session 전체 흐름 테스트"""

    @pytest.mark.asyncio
    async def test_four_chunks(self, make_client, upload_session_response, upload_complete_response):
        client, session = make_client(
            handler=upload_handler(upload_session_response, upload_complete_response)
        )
        file_size = 1_000_000
        blocks = [b"a" * KIB_320, b"b" * KIB_320, b"c" * KIB_320, b"d" * (file_size - 3 * KIB_320)]

        item = await client.upload_large_file(
            "test@example.com", UploadItemInfo(file_size=file_size, name="large.bin"), blocks,
            file_path="large.bin",
        )

        puts = [c for c in session.calls if c.method == "PUT"]
        assert [c.headers["Content-Range"] for c in puts] == [
            "bytes 0-327679/1000000",
            "bytes 327680-655359/1000000",
            "bytes 655360-983039/1000000",
            "bytes 983040-999999/1000000",
        ]
        assert all(c.url == upload_session_response["uploadUrl"] for c in puts)
        assert item.id == upload_complete_response["id"]

    @pytest.mark.asyncio
    async def test_second_chunk_fails(self, make_client, upload_session_response, upload_complete_response):
        client, session = make_client(handler=upload_handler(
            upload_session_response, upload_complete_response, fail_range=(327680, 655359)
        ))
        file_size = 1_000_000
        blocks = [b"a" * KIB_320, b"b" * KIB_320, b"c" * KIB_320, b"d" * (file_size - 3 * KIB_320)]

        with pytest.raises(ChunkTransferError) as exc_info:
            await client.upload_large_file(
                "test@example.com", UploadItemInfo(file_size=file_size), blocks, file_path="large.bin",
            )

        assert exc_info.value.byte_range == (327680, 655359)
        assert len([c for c in session.calls if c.method == "PUT"]) == 2

    @pytest.mark.asyncio
    async def test_truncated_block(self, make_client, upload_session_response, upload_complete_response):
        client, session = make_client(
            handler=upload_handler(upload_session_response, upload_complete_response)
        )

        await client.upload_large_file(
            "test@example.com", UploadItemInfo(file_size=500_000), [b"z" * 600_000], file_path="t.bin",
        )

        put = session.calls[1]
        assert put.headers["Content-Range"] == "bytes 0-499999/500000"
        assert len(put.data) == 500_000

    @pytest.mark.asyncio
    async def test_oversized_block_after_session(self, make_client, upload_session_response):
        client, session = make_client([FakeResponse(200, upload_session_response)])
        client.settings.set("upload_chunk_size", KIB_320)
        client.settings.set("max_fragment_size", 2 * KIB_320)

        with pytest.raises(FragmentSizeError):
            await client.upload_large_file(
                "test@example.com", UploadItemInfo(file_size=10 * KIB_320), [b"x" * (3 * KIB_320)],
                file_path="big.bin",
            )

        assert [c.method for c in session.calls] == ["POST"]

    @pytest.mark.asyncio
    async def test_final_body_without_id(self, make_client, upload_session_response):
        client, _ = make_client([
            FakeResponse(200, upload_session_response),
            FakeResponse(201, {"name": "no-id.bin"}),
        ])

        with pytest.raises(PayloadValidationError):
            await client.upload_large_file(
                "test@example.com", UploadItemInfo(file_size=3), [b"abc"], file_path="no-id.bin",
            )

    @pytest.mark.asyncio
    async def test_zero_byte_file(self, make_client, drive_item_data):
        client, session = make_client([FakeResponse(201, drive_item_data)])

        await client.upload_large_file(
            "test@example.com", UploadItemInfo(file_size=0), [b"ignored"], file_path="empty.txt",
        )

        assert len(session.calls) == 1
        call = session.calls[0]
        assert call.method == "PUT"
        assert call.url.startswith(f"{BASE}/me/drive/root:/empty.txt:/content")
        assert call.data == b""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target", [{}, {"parent_id": "P1"}])
    async def test_zero_byte_file_without_target(self, make_client, target):
        """0바이트도 대상이 없으면 세션 경로와 같은 SessionCreationError"""
        client, session = make_client([])

        with pytest.raises(SessionCreationError):
            await client.upload_large_file("test@example.com", UploadItemInfo(file_size=0), [], **target)

        assert session.calls == []


class TestUploadFile:
    """로컬 파일 업로드 경로 선택 테스트"""

    @pytest.fixture
    def small_limit_settings(self):
        return OneDriveSettings(
            {"simple_upload_max_size": 100, "upload_chunk_size": KIB_320},
            load_env=False,
        )

    @pytest.mark.asyncio
    async def test_small_file_simple_put(self, make_client, small_limit_settings, drive_item_data, tmp_path):
        local = tmp_path / "small.txt"
        local.write_bytes(b"hello")
        client, session = make_client([FakeResponse(201, drive_item_data)], client_settings=small_limit_settings)

        await client.upload_file("test@example.com", local, "Documents/small.txt")

        assert len(session.calls) == 1
        assert session.calls[0].url.startswith(f"{BASE}/me/drive/root:/Documents/small.txt:/content")
        assert session.calls[0].data == b"hello"

    @pytest.mark.asyncio
    async def test_large_file_uses_session(
        self, make_client, small_limit_settings, upload_session_response, upload_complete_response, tmp_path
    ):
        local = tmp_path / "large.bin"
        local.write_bytes(b"q" * (KIB_320 + 100))
        client, session = make_client(
            handler=upload_handler(upload_session_response, upload_complete_response),
            client_settings=small_limit_settings,
        )
        progress = []

        item = await client.upload_file(
            "test@example.com", local, "Backups/large.bin",
            on_progress=lambda p: progress.append(p.transferred_bytes),
        )

        post = session.calls[0]
        assert post.url == f"{BASE}/me/drive/root:/Backups/large.bin:/createUploadSession"
        assert post.json["item"]["name"] == "large.bin"
        assert post.json["item"]["fileSize"] == KIB_320 + 100
        assert [c.headers["Content-Range"] for c in session.calls[1:]] == [
            f"bytes 0-{KIB_320 - 1}/{KIB_320 + 100}",
            f"bytes {KIB_320}-{KIB_320 + 99}/{KIB_320 + 100}",
        ]
        assert progress == [KIB_320, KIB_320 + 100]
        assert item.id == upload_complete_response["id"]
