"""
OneDrive Service - GraphOneDriveClient Facade
인자를 위임하고, 결과/오류를 {"success": ...} 딕셔너리로 변환하는 서비스 레이어
"""

import logging
from dataclasses import asdict
from functools import wraps
from typing import Dict, Any, Optional, List, Callable, Union
import os

from .config import OneDriveSettings
from .chunked_upload import BlockSource, UploadProgress
from .graph_onedrive_client import GraphOneDriveClient
from .onedrive_errors import OneDriveError
from .onedrive_types import (
    ConflictBehavior,
    DriveItemPage,
    LinkScope,
    LinkType,
)
from .upload_types import UploadItemInfo

logger = logging.getLogger(__name__)


def _page_result(page: DriveItemPage) -> Dict[str, Any]:
    return {
        "success": True,
        "files": [asdict(item) for item in page.items],
        "count": page.count,
        "next_link": page.next_link,
    }


def service_call(func=None, *, requires_user: bool = True):
    """
    초기화 확인 + user_email 기본값 + OneDriveError -> 실패 딕셔너리

    Args:
        requires_user: False면 user_email 확인 생략 (사전 인증 URL 작업)
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            self._ensure_initialized()
            if requires_user:
                if not kwargs.get("user_email"):
                    kwargs["user_email"] = self.settings.get("user_email")
                if not kwargs["user_email"]:
                    return {"success": False, "error": "user_email이 필요합니다. ONEDRIVE_USER_EMAIL을 설정하세요."}
            try:
                return await func(self, *args, **kwargs)
            except OneDriveError as e:
                logger.error(f"{func.__name__} 실패: {e}")
                return {"success": False, **e.to_dict()}

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


class OneDriveService:
    """
    GraphOneDriveClient의 Facade

    - 동일 시그니처로 위임 (user_email은 키워드 인자, 생략 시 설정값)
    - 타입 결과를 딕셔너리로 변환
    """

    def __init__(
        self,
        client: Optional[GraphOneDriveClient] = None,
        settings: Optional[OneDriveSettings] = None,
    ):
        self.settings = settings or (client.settings if client else OneDriveSettings())
        self._client: Optional[GraphOneDriveClient] = client
        self._initialized = False

    async def initialize(self) -> bool:
        """서비스 초기화"""
        if self._initialized:
            return True

        if self._client is None:
            self._client = GraphOneDriveClient(settings=self.settings)

        if await self._client.initialize():
            self._initialized = True
            return True
        return False

    def _ensure_initialized(self):
        """초기화 확인"""
        if not self._initialized or not self._client:
            raise RuntimeError("OneDriveService not initialized. Call initialize() first.")

    async def close(self):
        """리소스 정리"""
        if self._client:
            await self._client.close()
            self._client = None
        self._initialized = False

    # ========================================================================
    # 드라이브 / 조회 메서드
    # ========================================================================

    @service_call
    async def get_drive_info(self, *, user_email: Optional[str] = None) -> Dict[str, Any]:
        """드라이브 정보 조회"""
        drive = await self._client.get_drive_info(user_email)
        return {"success": True, "drive": asdict(drive)}

    @service_call
    async def list_files(
        self,
        folder_path: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """파일/폴더 목록 조회 (search가 있으면 검색)"""
        if search:
            page = await self._client.search(user_email, search, limit)
        else:
            page = await self._client.list_children(user_email, folder_path=folder_path, limit=limit)
        return _page_result(page)

    @service_call
    async def list_next_page(self, next_link: str, *, user_email: Optional[str] = None) -> Dict[str, Any]:
        """다음 페이지 조회"""
        page = await self._client.list_next_page(user_email, next_link)
        return _page_result(page)

    @service_call
    async def get_item(
        self,
        item_id: Optional[str] = None,
        file_path: Optional[str] = None,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """파일/폴더 정보 조회"""
        item = await self._client.get_item(user_email, item_id=item_id, file_path=file_path)
        return {"success": True, "item": asdict(item)}

    # ========================================================================
    # 생성 / 수정 / 삭제 메서드
    # ========================================================================

    @service_call
    async def create_folder(
        self,
        folder_name: str,
        parent_path: Optional[str] = None,
        parent_id: Optional[str] = None,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """폴더 생성"""
        folder = await self._client.create_folder(
            user_email, folder_name, parent_path=parent_path, parent_id=parent_id
        )
        return {"success": True, "folder": asdict(folder)}

    @service_call
    async def update_item(
        self,
        item_id: str,
        changes: Dict[str, Any],
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """아이템 속성 수정"""
        item = await self._client.update_item(user_email, item_id, changes)
        return {"success": True, "item": asdict(item)}

    @service_call
    async def rename_item(self, item_id: str, new_name: str, *, user_email: Optional[str] = None) -> Dict[str, Any]:
        """이름 변경"""
        item = await self._client.rename_item(user_email, item_id, new_name)
        return {"success": True, "item": asdict(item)}

    @service_call
    async def move_item(
        self,
        item_id: str,
        dest_parent_id: str,
        new_name: Optional[str] = None,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """아이템 이동"""
        item = await self._client.move_item(user_email, item_id, dest_parent_id, new_name)
        return {"success": True, "item": asdict(item)}

    @service_call
    async def delete_item(
        self,
        item_id: Optional[str] = None,
        file_path: Optional[str] = None,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """파일/폴더 삭제"""
        await self._client.delete_item(user_email, item_id=item_id, file_path=file_path)
        return {"success": True, "message": f"삭제됨: {item_id or file_path}"}

    @service_call
    async def restore_item(
        self,
        item_id: str,
        parent_id: Optional[str] = None,
        name: Optional[str] = None,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """삭제된 아이템 복원"""
        item = await self._client.restore_item(user_email, item_id, parent_id, name)
        return {"success": True, "item": asdict(item)}

    @service_call
    async def copy_item(
        self,
        item_id: str,
        dest_parent_id: str,
        new_name: Optional[str] = None,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """아이템 복사 (비동기 작업 시작)"""
        operation = await self._client.copy_item(user_email, item_id, dest_parent_id, new_name)
        return {
            "success": True,
            "message": "복사 작업이 시작되었습니다.",
            "monitor_url": operation.monitor_url,
        }

    @service_call(requires_user=False)
    async def get_copy_status(self, monitor_url: str) -> Dict[str, Any]:
        """복사 작업 진행 상태 조회"""
        status = await self._client.get_copy_status(monitor_url)
        return {"success": True, "status": asdict(status), "completed": status.is_completed()}

    # ========================================================================
    # 다운로드 / 업로드 메서드
    # ========================================================================

    @service_call
    async def download_file(
        self,
        dest_path: Union[str, "os.PathLike[str]"],
        item_id: Optional[str] = None,
        file_path: Optional[str] = None,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """파일을 로컬 경로로 다운로드"""
        written = await self._client.download_to_file(
            user_email, dest_path, item_id=item_id, file_path=file_path
        )
        return {"success": True, "dest_path": str(dest_path), "size": written}

    @service_call
    async def upload_file(
        self,
        local_path: Union[str, "os.PathLike[str]"],
        dest_path: str,
        overwrite: bool = True,
        on_progress: Optional[Callable[[UploadProgress], Any]] = None,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """로컬 파일 업로드 (크기에 따라 단순 / 청크 업로드)"""
        conflict_behavior = ConflictBehavior.REPLACE if overwrite else ConflictBehavior.FAIL
        item = await self._client.upload_file(
            user_email, local_path, dest_path, conflict_behavior, on_progress
        )
        return {"success": True, "file": asdict(item)}

    @service_call
    async def upload_large_file(
        self,
        item_info: UploadItemInfo,
        blocks: BlockSource,
        file_path: Optional[str] = None,
        parent_id: Optional[str] = None,
        on_progress: Optional[Callable[[UploadProgress], Any]] = None,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """블록 시퀀스를 업로드 세션으로 업로드"""
        item = await self._client.upload_large_file(
            user_email, item_info, blocks, file_path=file_path, parent_id=parent_id,
            on_progress=on_progress,
        )
        return {"success": True, "file": asdict(item)}

    # ========================================================================
    # 공유 메서드
    # ========================================================================

    @service_call
    async def share_item(
        self,
        item_id: str,
        link_type: Union[str, LinkType] = "view",
        scope: Union[str, LinkScope] = "anonymous",
        password: Optional[str] = None,
        expiration_datetime: Optional[str] = None,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """공유 링크 생성 (link_type / scope는 문자열 또는 LinkType / LinkScope)"""
        try:
            link_type = LinkType(link_type)
            scope = LinkScope(scope)
        except ValueError as e:
            return {"success": False, "error": str(e), "error_type": "ValueError"}

        permission = await self._client.create_sharing_link(
            user_email,
            item_id,
            link_type=link_type,
            scope=scope,
            password=password,
            expiration_datetime=expiration_datetime,
        )
        return {"success": True, "link": permission.link_web_url, "permission": asdict(permission)}

    @service_call
    async def invite(
        self,
        item_id: str,
        recipients: List[str],
        roles: Optional[List[str]] = None,
        message: Optional[str] = None,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """사용자 초대로 공유"""
        permissions = await self._client.invite(user_email, item_id, recipients, roles, message)
        return {"success": True, "permissions": [asdict(p) for p in permissions]}

    @service_call
    async def list_permissions(self, item_id: str, *, user_email: Optional[str] = None) -> Dict[str, Any]:
        """공유 권한 목록"""
        permissions = await self._client.list_permissions(user_email, item_id)
        return {
            "success": True,
            "permissions": [asdict(p) for p in permissions],
            "count": len(permissions),
        }

    @service_call
    async def delete_permission(
        self,
        item_id: str,
        permission_id: str,
        *,
        user_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """공유 권한 삭제"""
        await self._client.delete_permission(user_email, item_id, permission_id)
        return {"success": True, "message": f"권한 삭제됨: {permission_id}"}
