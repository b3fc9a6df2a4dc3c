"""
OneDrive Graph API Client
Microsoft Graph API를 사용한 OneDrive 작업 처리
token provider를 통한 인증, 업로드 세션 기반 대용량 업로드
"""

import asyncio
import logging
import os
from typing import Optional, List, Dict, Any, Mapping, Tuple, Type, Callable, Union

import aiohttp
from pydantic import ValidationError

from core import StaticTokenProvider, TokenProviderProtocol
from .config import OneDriveSettings
from .chunked_upload import (
    BlockSource,
    ChunkSequencer,
    UploadProgress,
    iter_file_blocks,
)
from .graph_onedrive_url import GraphOneDriveUrlBuilder
from .onedrive_errors import (
    AuthenticationError,
    ChunkTransferError,
    GraphApiError,
    PayloadValidationError,
    SessionCreationError,
)
from .onedrive_types import (
    AsyncOperationStatus,
    ConflictBehavior,
    CopyOperation,
    DriveInfo,
    DriveItem,
    DriveItemPage,
    LinkScope,
    LinkType,
    Permission,
)
from .upload_types import UploadItemInfo, UploadSession, UploadSessionStatus

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = (200, 201, 202, 204)


def _short_url(url: str) -> str:
    # upload / monitor URL은 토큰 성격의 쿼리를 포함하므로 로그에는 경로 앞부분만
    return url.split("?", 1)[0][:80]


class GraphOneDriveClient:
    """OneDrive Graph API 클라이언트"""

    GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"

    def __init__(
        self,
        token_provider: Optional[TokenProviderProtocol] = None,
        settings: Optional[OneDriveSettings] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        클라이언트 초기화

        Args:
            token_provider: 토큰 제공자 (없으면 설정의 access_token 사용)
            settings: 설정 (없으면 환경변수 / .env 에서 로드)
            session: 외부에서 관리하는 aiohttp 세션 (없으면 initialize()에서 생성)
        """
        self.settings = settings or OneDriveSettings()
        self.token_provider = token_provider or StaticTokenProvider.from_settings(self.settings)
        self.graph_base_url = self.settings.graph_base_url or self.GRAPH_BASE_URL
        self.urls = GraphOneDriveUrlBuilder(self.settings.drive_root)
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None
        self._initialized = session is not None

    async def initialize(self) -> bool:
        """클라이언트 초기화"""
        if self._initialized:
            return True

        self._session = aiohttp.ClientSession()
        self._owns_session = True
        self._initialized = True
        logger.info("GraphOneDriveClient initialized")
        return True

    async def close(self):
        """리소스 정리"""
        if self._session and self._owns_session:
            await self._session.close()
        self._session = None
        self._initialized = False

    async def __aenter__(self) -> "GraphOneDriveClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _get_access_token(self, user_email: str) -> str:
        """
        사용자 이메일로 유효한 액세스 토큰 조회 (자동 갱신은 provider 담당)

        Raises:
            AuthenticationError: 토큰 없음
        """
        token = await self.token_provider.validate_and_refresh_token(user_email)
        if not token:
            logger.error(f"토큰 조회 실패: {user_email}")
            raise AuthenticationError(user_email)
        return token

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith("http://") or endpoint.startswith("https://"):
            return endpoint
        return f"{self.graph_base_url}{endpoint}"

    def _timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.settings.get("request_timeout", 60))

    @staticmethod
    async def _read_json(response, context: str) -> Dict[str, Any]:
        try:
            data = await response.json(content_type=None)
        except ValueError as e:
            raise PayloadValidationError(f"{context}: response is not valid JSON ({e})") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise PayloadValidationError(
                f"{context}: expected a JSON object, got {type(data).__name__}"
            )
        return data

    async def _request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        data: Optional[bytes] = None,
        context: str = "API 요청",
        error_cls: Type[GraphApiError] = GraphApiError,
        error_kwargs: Optional[Dict[str, Any]] = None,
    ) -> Tuple[int, Mapping[str, str], Dict[str, Any]]:
        """
        HTTP 요청 1회 수행

        Returns:
            (status, response headers, JSON body - 204 / 빈 본문이면 {})

        Raises:
            error_cls: 비성공 상태 또는 전송 오류
            PayloadValidationError: 성공 응답의 본문이 JSON 객체가 아님
        """
        if not self._initialized:
            await self.initialize()

        error_kwargs = error_kwargs or {}
        try:
            async with self._session.request(
                method,
                url,
                headers=headers,
                json=json_data,
                data=data,
                timeout=self._timeout(),
            ) as response:
                if response.status in SUCCESS_STATUSES:
                    if response.status == 204:
                        return response.status, response.headers, {}
                    body = await self._read_json(response, context)
                    return response.status, response.headers, body

                error_text = await response.text()
                logger.error(f"{context} 실패: {response.status} - {error_text[:500]}")
                raise error_cls.from_response(response.status, error_text, context, **error_kwargs)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"{context} 오류: {e!r}")
            raise error_cls(f"{context} failed: {e!r}", **error_kwargs) from e

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        user_email: str,
        json_data: Optional[Dict[str, Any]] = None,
        data: Optional[bytes] = None,
        content_type: str = "application/json",
        context: str = "API 요청",
        error_cls: Type[GraphApiError] = GraphApiError,
    ) -> Dict[str, Any]:
        """
        인증된 Graph API 요청 수행

        Args:
            method: HTTP 메서드 (GET, POST, PUT, PATCH, DELETE)
            endpoint: API 엔드포인트 (상대 경로 또는 절대 URL)
            user_email: 사용자 이메일
            json_data: JSON 데이터
            data: 바이너리 데이터
            content_type: Content-Type 헤더
            context: 로그 / 오류 메시지용 작업 이름
            error_cls: 실패 시 발생시킬 예외 타입

        Returns:
            API 응답 본문
        """
        access_token = await self._get_access_token(user_email)
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": content_type,
        }
        _, _, body = await self._request(
            method,
            self._url(endpoint),
            headers=headers,
            json_data=json_data,
            data=data,
            context=context,
            error_cls=error_cls,
        )
        return body

    @staticmethod
    def _parse_drive_item(data: Any, context: str) -> DriveItem:
        if not isinstance(data, dict) or not data.get("id"):
            raise PayloadValidationError(f"{context}: response is not a driveItem (missing id)")
        return DriveItem.from_dict(data)

    # ========================================================================
    # 드라이브 정보 메서드
    # ========================================================================

    async def get_drive_info(self, user_email: str) -> DriveInfo:
        """사용자 드라이브 정보 조회"""
        data = await self._make_request("GET", self.urls.drive(), user_email, context="드라이브 조회")
        return DriveInfo.from_dict(data)

    # ========================================================================
    # 파일/폴더 조회 메서드
    # ========================================================================

    async def list_children(
        self,
        user_email: str,
        folder_path: Optional[str] = None,
        folder_id: Optional[str] = None,
        limit: int = 50,
    ) -> DriveItemPage:
        """
        폴더의 하위 아이템 목록 조회

        Args:
            user_email: 사용자 이메일
            folder_path: 폴더 경로 (없으면 루트)
            folder_id: 폴더 ID (folder_path보다 우선)
            limit: 페이지 크기

        Returns:
            DriveItemPage (next_link가 있으면 list_next_page로 이어서 조회)
        """
        endpoint = self.urls.children(folder_id, folder_path, limit)
        data = await self._make_request("GET", endpoint, user_email, context="목록 조회")
        return DriveItemPage.from_dict(data)

    async def list_next_page(self, user_email: str, next_link: str) -> DriveItemPage:
        """@odata.nextLink 로 다음 페이지 조회"""
        data = await self._make_request("GET", next_link, user_email, context="다음 페이지 조회")
        return DriveItemPage.from_dict(data)

    async def search(self, user_email: str, query: str, limit: int = 50) -> DriveItemPage:
        """드라이브 전체 검색"""
        if not query:
            raise ValueError("search query must not be empty")
        endpoint = self.urls.search(query, limit)
        data = await self._make_request("GET", endpoint, user_email, context="검색")
        return DriveItemPage.from_dict(data)

    async def get_item(
        self,
        user_email: str,
        item_id: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> DriveItem:
        """
        파일/폴더 정보 조회

        Args:
            user_email: 사용자 이메일
            item_id: 아이템 ID
            file_path: 아이템 경로 (item_id가 없을 때)

        Returns:
            DriveItem
        """
        data = await self._make_request(
            "GET", self.urls.item(item_id, file_path), user_email, context="아이템 조회"
        )
        return self._parse_drive_item(data, "아이템 조회")

    # ========================================================================
    # 생성/수정/삭제 메서드
    # ========================================================================

    async def create_folder(
        self,
        user_email: str,
        folder_name: str,
        parent_path: Optional[str] = None,
        parent_id: Optional[str] = None,
        conflict_behavior: ConflictBehavior = ConflictBehavior.RENAME,
    ) -> DriveItem:
        """
        폴더 생성

        Args:
            user_email: 사용자 이메일
            folder_name: 생성할 폴더 이름
            parent_path: 부모 폴더 경로 (없으면 루트)
            parent_id: 부모 폴더 ID (parent_path보다 우선)
            conflict_behavior: 같은 이름이 있을 때 동작

        Returns:
            생성된 폴더
        """
        json_data = {
            "name": folder_name,
            "folder": {},
            "@microsoft.graph.conflictBehavior": conflict_behavior.value,
        }
        data = await self._make_request(
            "POST",
            self.urls.children(parent_id, parent_path),
            user_email,
            json_data,
            context="폴더 생성",
        )
        return self._parse_drive_item(data, "폴더 생성")

    async def update_item(
        self,
        user_email: str,
        item_id: str,
        changes: Dict[str, Any],
    ) -> DriveItem:
        """
        아이템 속성 수정 (PATCH)

        Args:
            user_email: 사용자 이메일
            item_id: 아이템 ID
            changes: Graph driveItem 속성 (name, description, parentReference ...)
        """
        if not changes:
            raise ValueError("changes must not be empty")
        data = await self._make_request(
            "PATCH", self.urls.item(item_id), user_email, changes, context="아이템 수정"
        )
        return self._parse_drive_item(data, "아이템 수정")

    async def rename_item(self, user_email: str, item_id: str, new_name: str) -> DriveItem:
        """이름 변경"""
        return await self.update_item(user_email, item_id, {"name": new_name})

    async def move_item(
        self,
        user_email: str,
        item_id: str,
        dest_parent_id: str,
        new_name: Optional[str] = None,
    ) -> DriveItem:
        """다른 폴더로 이동 (선택적으로 이름 변경)"""
        changes: Dict[str, Any] = {"parentReference": {"id": dest_parent_id}}
        if new_name:
            changes["name"] = new_name
        return await self.update_item(user_email, item_id, changes)

    async def delete_item(
        self,
        user_email: str,
        item_id: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> None:
        """
        파일/폴더 삭제 (휴지통으로 이동, restore_item으로 복원 가능)

        Args:
            user_email: 사용자 이메일
            item_id: 아이템 ID
            file_path: 아이템 경로 (item_id가 없을 때)
        """
        if not item_id and not file_path:
            raise ValueError("item_id or file_path is required")
        await self._make_request(
            "DELETE", self.urls.item(item_id, file_path), user_email, context="삭제"
        )
        logger.info(f"Deleted drive item {item_id or file_path}")

    async def restore_item(
        self,
        user_email: str,
        item_id: str,
        parent_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> DriveItem:
        """
        삭제된 아이템 복원

        Args:
            user_email: 사용자 이메일
            item_id: 삭제된 아이템 ID
            parent_id: 복원 위치 (없으면 원래 위치)
            name: 복원 시 새 이름
        """
        json_data: Dict[str, Any] = {}
        if parent_id:
            json_data["parentReference"] = {"id": parent_id}
        if name:
            json_data["name"] = name
        data = await self._make_request(
            "POST", self.urls.item(item_id, action="restore"), user_email, json_data, context="복원"
        )
        return self._parse_drive_item(data, "복원")

    async def copy_item(
        self,
        user_email: str,
        item_id: str,
        dest_parent_id: str,
        new_name: Optional[str] = None,
        dest_drive_id: Optional[str] = None,
    ) -> CopyOperation:
        """
        아이템 복사 (비동기 작업)

        Args:
            user_email: 사용자 이메일
            item_id: 원본 아이템 ID
            dest_parent_id: 대상 폴더 ID
            new_name: 새 이름 (없으면 원본 이름 유지)
            dest_drive_id: 다른 드라이브로 복사할 때 드라이브 ID

        Returns:
            CopyOperation (get_copy_status로 진행 상태 조회)
        """
        parent_ref: Dict[str, Any] = {"id": dest_parent_id}
        if dest_drive_id:
            parent_ref["driveId"] = dest_drive_id
        json_data: Dict[str, Any] = {"parentReference": parent_ref}
        if new_name:
            json_data["name"] = new_name

        access_token = await self._get_access_token(user_email)
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

        # copy 요청은 202 Accepted + Location 헤더 반환
        _, response_headers, _ = await self._request(
            "POST",
            self._url(self.urls.item(item_id, action="copy")),
            headers=headers,
            json_data=json_data,
            context="복사",
        )
        monitor_url = response_headers.get("Location")
        if not monitor_url:
            logger.warning(f"Copy of {item_id} accepted without a monitor URL")
        return CopyOperation(monitor_url=monitor_url)

    async def get_copy_status(self, monitor_url: str) -> AsyncOperationStatus:
        """복사 작업 모니터 URL 조회 (사전 인증 URL, Authorization 없음)"""
        _, _, body = await self._request("GET", monitor_url, context="복사 상태 조회")
        return AsyncOperationStatus.from_dict(body)

    # ========================================================================
    # 다운로드 메서드
    # ========================================================================

    async def _open_content(self, user_email: str, item_id: Optional[str], file_path: Optional[str]):
        if not item_id and not file_path:
            raise ValueError("item_id or file_path is required")
        if not self._initialized:
            await self.initialize()
        access_token = await self._get_access_token(user_email)
        return self._session.request(
            "GET",
            self._url(self.urls.content(item_id, file_path)),
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=self._timeout(),
        )

    async def download_file(
        self,
        user_email: str,
        item_id: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> bytes:
        """
        파일 내용 다운로드

        Args:
            user_email: 사용자 이메일
            item_id: 파일 ID
            file_path: 파일 경로 (item_id가 없을 때)

        Returns:
            파일 내용
        """
        target = item_id or file_path
        try:
            async with await self._open_content(user_email, item_id, file_path) as response:
                if response.status == 200:
                    return await response.read()
                error_text = await response.text()
                logger.error(f"다운로드 실패: {response.status} - {error_text[:500]}")
                raise GraphApiError.from_response(response.status, error_text, f"다운로드 {target}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"다운로드 오류: {e!r}")
            raise GraphApiError(f"다운로드 {target} failed: {e!r}") from e

    async def download_to_file(
        self,
        user_email: str,
        dest_path: Union[str, "os.PathLike[str]"],
        item_id: Optional[str] = None,
        file_path: Optional[str] = None,
        chunk_size: int = 1024 * 1024,
    ) -> int:
        """
        파일을 로컬 경로로 스트리밍 다운로드
        {dest_path}.part 에 기록한 뒤 완료 시 교체 (실패 시 dest_path는 그대로)

        Returns:
            기록한 바이트 수
        """
        target = item_id or file_path
        part_path = f"{os.fspath(dest_path)}.part"
        written = 0
        try:
            async with await self._open_content(user_email, item_id, file_path) as response:
                if response.status != 200:
                    error_text = await response.text()
                    logger.error(f"다운로드 실패: {response.status} - {error_text[:500]}")
                    raise GraphApiError.from_response(response.status, error_text, f"다운로드 {target}")
                try:
                    with open(part_path, "wb") as f:
                        async for chunk in response.content.iter_chunked(chunk_size):
                            f.write(chunk)
                            written += len(chunk)
                except BaseException:
                    if os.path.exists(part_path):
                        os.remove(part_path)
                    raise
            os.replace(part_path, dest_path)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"다운로드 오류: {e!r}")
            raise GraphApiError(f"다운로드 {target} failed: {e!r}") from e

        logger.info(f"Downloaded {target} -> {dest_path} ({written:,} bytes)")
        return written

    # ========================================================================
    # 공유 메서드
    # ========================================================================

    async def create_sharing_link(
        self,
        user_email: str,
        item_id: str,
        link_type: LinkType = LinkType.VIEW,
        scope: LinkScope = LinkScope.ANONYMOUS,
        password: Optional[str] = None,
        expiration_datetime: Optional[str] = None,
    ) -> Permission:
        """
        공유 링크 생성

        Args:
            user_email: 사용자 이메일
            item_id: 아이템 ID
            link_type: view / edit / embed
            scope: anonymous / organization / users
            password: 링크 암호 (개인 OneDrive만 지원)
            expiration_datetime: 만료 시각 (ISO 8601)
        """
        json_data: Dict[str, Any] = {"type": link_type.value, "scope": scope.value}
        if password:
            json_data["password"] = password
        if expiration_datetime:
            json_data["expirationDateTime"] = expiration_datetime
        data = await self._make_request(
            "POST", self.urls.item(item_id, action="createLink"), user_email, json_data,
            context="공유 링크 생성",
        )
        return Permission.from_dict(data)

    async def invite(
        self,
        user_email: str,
        item_id: str,
        recipients: List[str],
        roles: Optional[List[str]] = None,
        message: Optional[str] = None,
        require_sign_in: bool = True,
        send_invitation: bool = True,
    ) -> List[Permission]:
        """
        사용자 초대로 공유

        Args:
            user_email: 사용자 이메일
            item_id: 아이템 ID
            recipients: 초대할 이메일 목록
            roles: ["read"] 또는 ["write"]
            message: 초대 메시지
            require_sign_in: 로그인 필요 여부
            send_invitation: 초대 메일 발송 여부
        """
        if not recipients:
            raise ValueError("recipients must not be empty")
        json_data: Dict[str, Any] = {
            "recipients": [{"email": email} for email in recipients],
            "roles": roles or ["read"],
            "requireSignIn": require_sign_in,
            "sendInvitation": send_invitation,
        }
        if message:
            json_data["message"] = message
        data = await self._make_request(
            "POST", self.urls.item(item_id, action="invite"), user_email, json_data, context="초대"
        )
        return [Permission.from_dict(p) for p in data.get("value", [])]

    async def list_permissions(self, user_email: str, item_id: str) -> List[Permission]:
        """아이템 공유 권한 목록"""
        data = await self._make_request(
            "GET", self.urls.permission(item_id), user_email, context="권한 조회"
        )
        return [Permission.from_dict(p) for p in data.get("value", [])]

    async def delete_permission(self, user_email: str, item_id: str, permission_id: str) -> None:
        """공유 권한 삭제"""
        await self._make_request(
            "DELETE", self.urls.permission(item_id, permission_id), user_email, context="권한 삭제"
        )

    # ========================================================================
    # 업로드 메서드
    # ========================================================================

    async def upload_small_file(
        self,
        user_email: str,
        content: bytes,
        file_path: Optional[str] = None,
        parent_id: Optional[str] = None,
        file_name: Optional[str] = None,
        content_type: str = "application/octet-stream",
        conflict_behavior: ConflictBehavior = ConflictBehavior.REPLACE,
    ) -> DriveItem:
        """
        단순 PUT 업로드 (4MB 이하)

        Args:
            user_email: 사용자 이메일
            content: 파일 내용
            file_path: 대상 경로
            parent_id: 부모 폴더 ID (file_name 필요)
            file_name: parent_id 사용 시 파일 이름
            content_type: 콘텐츠 타입
            conflict_behavior: 충돌 시 동작

        Returns:
            업로드된 파일
        """
        if parent_id:
            if not file_name:
                raise ValueError("file_name is required when uploading by parent_id")
            endpoint = self.urls.child_content(parent_id, file_name, conflict_behavior.value)
        elif file_path:
            endpoint = self.urls.content(file_path=file_path, conflict_behavior=conflict_behavior.value)
        else:
            raise ValueError("file_path or parent_id is required")

        data = await self._make_request(
            "PUT", endpoint, user_email, data=content, content_type=content_type, context="업로드"
        )
        item = self._parse_drive_item(data, "업로드")
        logger.info(f"Uploaded {item.name} ({len(content):,} bytes)")
        return item

    async def create_upload_session(
        self,
        user_email: str,
        item_info: UploadItemInfo,
        file_path: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> UploadSession:
        """
        Upload Session 생성 (재시도 없음)

        Args:
            user_email: 사용자 이메일
            item_info: 업로드할 아이템 메타데이터
            file_path: 대상 경로
            parent_id: 부모 폴더 ID (item_info.name 필요)

        Returns:
            UploadSession

        Raises:
            SessionCreationError: 서비스가 요청을 거부했거나 uploadUrl 없음
        """
        try:
            endpoint = self.urls.upload_session(file_path, parent_id, item_info.name)
        except ValueError as e:
            raise SessionCreationError(str(e)) from e

        data = await self._make_request(
            "POST",
            endpoint,
            user_email,
            item_info.to_request_body(),
            context="Upload Session 생성",
            error_cls=SessionCreationError,
        )

        upload_url = data.get("uploadUrl")
        if not upload_url:
            logger.error("Upload URL을 받지 못함")
            raise SessionCreationError("Upload session response has no uploadUrl", details=str(data))

        try:
            session = UploadSession.model_validate(data)
        except ValidationError as e:
            raise SessionCreationError(f"Malformed upload session response: {e}", details=str(data)) from e

        logger.info(
            f"Upload session created for {file_path or item_info.name} "
            f"({item_info.file_size:,} bytes, expires {session.expiration_date_time})"
        )
        return session

    async def transfer_range(
        self,
        upload_url: str,
        data: bytes,
        start_byte: int,
        end_byte: int,
        file_size: int,
    ) -> Dict[str, Any]:
        """
        바이트 범위 1개 PUT

        Args:
            upload_url: 세션 URL
            data: 범위의 바이트
            start_byte: 시작 오프셋 (포함)
            end_byte: 끝 오프셋 (포함)
            file_size: 전체 파일 크기

        Returns:
            응답 본문 (중간 청크: nextExpectedRanges, 마지막 청크: driveItem)

        Raises:
            ChunkTransferError: 비성공 상태 또는 전송 오류 (시도한 범위 포함)
        """
        if end_byte - start_byte + 1 != len(data):
            raise ValueError(
                f"range {start_byte}-{end_byte} does not match payload length {len(data)}"
            )

        # Content-Range 헤더 설정 (세션 URL은 사전 인증, Authorization 헤더 제외)
        headers = {
            "Content-Length": str(len(data)),
            "Content-Range": f"bytes {start_byte}-{end_byte}/{file_size}",
        }
        _, _, body = await self._request(
            "PUT",
            upload_url,
            headers=headers,
            data=data,
            context=f"청크 업로드 bytes {start_byte}-{end_byte}/{file_size}",
            error_cls=ChunkTransferError,
            error_kwargs={"start_byte": start_byte, "end_byte": end_byte, "file_size": file_size},
        )
        return body

    async def get_upload_session_status(self, upload_url: str) -> UploadSessionStatus:
        """업로드 세션 상태 조회 (서비스가 아직 기다리는 범위)"""
        _, _, body = await self._request("GET", upload_url, context="업로드 세션 상태 조회")
        return UploadSessionStatus.model_validate(body)

    async def cancel_upload_session(self, upload_url: str) -> None:
        """업로드 세션 취소 (업로드된 조각 폐기)"""
        await self._request("DELETE", upload_url, context="업로드 세션 취소")
        logger.info(f"Upload session cancelled: {_short_url(upload_url)}")

    async def upload_large_file(
        self,
        user_email: str,
        item_info: UploadItemInfo,
        blocks: BlockSource,
        file_path: Optional[str] = None,
        parent_id: Optional[str] = None,
        on_progress: Optional[Callable[[UploadProgress], Any]] = None,
    ) -> DriveItem:
        """
        Upload Session을 사용한 대용량 파일 업로드

        Args:
            user_email: 사용자 이메일
            item_info: 아이템 메타데이터 (file_size 필수)
            blocks: 파일 내용 블록 시퀀스 (동기/비동기 iterable)
            file_path: 대상 경로
            parent_id: 부모 폴더 ID (item_info.name 필요)
            on_progress: 청크 완료마다 호출

        Returns:
            생성/갱신된 파일

        Raises:
            SessionCreationError, ChunkTransferError, CallerContractViolation,
            PayloadValidationError
        """
        if item_info.file_size == 0:
            # 업로드 세션은 0바이트를 받을 수 없으므로 빈 본문 단순 업로드
            try:
                self.urls.upload_session(file_path, parent_id, item_info.name)
            except ValueError as e:
                raise SessionCreationError(str(e)) from e
            logger.info("Zero-byte file: using simple upload instead of an upload session")
            return await self.upload_small_file(
                user_email,
                b"",
                file_path=file_path,
                parent_id=parent_id,
                file_name=item_info.name,
                conflict_behavior=item_info.conflict_behavior,
            )

        session = await self.create_upload_session(user_email, item_info, file_path, parent_id)

        sequencer = ChunkSequencer(
            self.transfer_range,
            item_info.file_size,
            max_fragment_size=self.settings.get("max_fragment_size"),
            enforce_alignment=self.settings.get("enforce_chunk_alignment", False),
            on_progress=on_progress,
        )
        body = await sequencer.run(session, blocks)

        item = self._parse_drive_item(body, "업로드 완료 응답")
        logger.info(f"업로드 완료: {item.name} ({item_info.file_size:,} bytes)")
        return item

    async def upload_file(
        self,
        user_email: str,
        local_path: Union[str, "os.PathLike[str]"],
        dest_path: str,
        conflict_behavior: ConflictBehavior = ConflictBehavior.REPLACE,
        on_progress: Optional[Callable[[UploadProgress], Any]] = None,
    ) -> DriveItem:
        """
        로컬 파일 업로드
        - simple_upload_max_size 이하: 단순 PUT 업로드
        - 초과: Upload Session (청크 업로드)

        Args:
            user_email: 사용자 이메일
            local_path: 로컬 파일 경로
            dest_path: OneDrive 대상 경로
            conflict_behavior: 충돌 시 동작
            on_progress: 청크 완료마다 호출 (청크 업로드일 때)
        """
        file_size = os.path.getsize(local_path)

        if file_size <= self.settings.get("simple_upload_max_size"):
            with open(local_path, "rb") as f:
                content = f.read()
            return await self.upload_small_file(
                user_email, content, file_path=dest_path, conflict_behavior=conflict_behavior
            )

        item_info = UploadItemInfo(
            file_size=file_size,
            conflict_behavior=conflict_behavior,
            name=os.path.basename(dest_path.rstrip("/")),
        )
        blocks = iter_file_blocks(local_path, self.settings.get("upload_chunk_size"))
        return await self.upload_large_file(
            user_email, item_info, blocks, file_path=dest_path, on_progress=on_progress
        )
