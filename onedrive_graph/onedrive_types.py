"""
OneDrive Types
Graph driveItem / drive / permission 응답을 담는 타입 정의
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum


class ItemType(str, Enum):
    """아이템 유형"""
    FILE = "file"
    FOLDER = "folder"
    PACKAGE = "package"
    UNKNOWN = "unknown"


class ConflictBehavior(str, Enum):
    """충돌 시 동작"""
    FAIL = "fail"
    REPLACE = "replace"
    RENAME = "rename"


class LinkType(str, Enum):
    """공유 링크 유형"""
    VIEW = "view"
    EDIT = "edit"
    EMBED = "embed"


class LinkScope(str, Enum):
    """공유 링크 범위"""
    ANONYMOUS = "anonymous"
    ORGANIZATION = "organization"
    USERS = "users"


@dataclass
class IdentityInfo:
    """사용자 정보 (identitySet의 user)"""
    id: Optional[str] = None
    display_name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IdentityInfo":
        user = data.get("user", data)
        return cls(
            id=user.get("id"),
            display_name=user.get("displayName"),
            email=user.get("email"),
        )


@dataclass
class DriveInfo:
    """드라이브 정보"""
    id: str
    name: str
    drive_type: str = "personal"
    owner: Optional[IdentityInfo] = None
    quota_total: int = 0
    quota_used: int = 0
    quota_remaining: int = 0
    quota_deleted: int = 0
    quota_state: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DriveInfo":
        owner_data = data.get("owner", {})
        owner = IdentityInfo.from_dict(owner_data) if owner_data else None

        quota = data.get("quota", {})

        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            drive_type=data.get("driveType", "personal"),
            owner=owner,
            quota_total=quota.get("total", 0),
            quota_used=quota.get("used", 0),
            quota_remaining=quota.get("remaining", 0),
            quota_deleted=quota.get("deleted", 0),
            quota_state=quota.get("state"),
        )


@dataclass
class DriveItem:
    """드라이브 아이템 (파일 또는 폴더)"""
    id: str
    name: str
    item_type: ItemType = ItemType.UNKNOWN
    size: int = 0
    e_tag: Optional[str] = None
    c_tag: Optional[str] = None
    description: Optional[str] = None
    created_datetime: Optional[str] = None
    last_modified_datetime: Optional[str] = None
    web_url: Optional[str] = None
    download_url: Optional[str] = None
    parent_id: Optional[str] = None
    parent_path: Optional[str] = None
    drive_id: Optional[str] = None
    child_count: int = 0
    mime_type: Optional[str] = None
    sha256_hash: Optional[str] = None
    quick_xor_hash: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DriveItem":
        # Determine item type
        if "folder" in data:
            item_type = ItemType.FOLDER
            child_count = (data.get("folder") or {}).get("childCount", 0)
        elif "file" in data:
            item_type = ItemType.FILE
            child_count = 0
        elif "package" in data:
            item_type = ItemType.PACKAGE
            child_count = 0
        else:
            item_type = ItemType.UNKNOWN
            child_count = 0

        file_info = data.get("file") or {}
        hashes = file_info.get("hashes") or {}
        parent_ref = data.get("parentReference") or {}

        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            item_type=item_type,
            size=data.get("size", 0),
            e_tag=data.get("eTag"),
            c_tag=data.get("cTag"),
            description=data.get("description"),
            created_datetime=data.get("createdDateTime"),
            last_modified_datetime=data.get("lastModifiedDateTime"),
            web_url=data.get("webUrl"),
            download_url=data.get("@microsoft.graph.downloadUrl"),
            parent_id=parent_ref.get("id"),
            parent_path=parent_ref.get("path"),
            drive_id=parent_ref.get("driveId"),
            child_count=child_count,
            mime_type=file_info.get("mimeType"),
            sha256_hash=hashes.get("sha256Hash"),
            quick_xor_hash=hashes.get("quickXorHash"),
        )

    def is_folder(self) -> bool:
        return self.item_type == ItemType.FOLDER

    def is_file(self) -> bool:
        return self.item_type == ItemType.FILE


@dataclass
class DriveItemPage:
    """목록/검색 결과 한 페이지"""
    items: List[DriveItem] = field(default_factory=list)
    next_link: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DriveItemPage":
        return cls(
            items=[DriveItem.from_dict(item) for item in data.get("value", [])],
            next_link=data.get("@odata.nextLink"),
        )

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def has_more(self) -> bool:
        return self.next_link is not None


@dataclass
class Permission:
    """공유 권한 (링크 또는 초대)"""
    id: str
    roles: List[str] = field(default_factory=list)
    link_type: Optional[str] = None
    link_scope: Optional[str] = None
    link_web_url: Optional[str] = None
    granted_to: Optional[IdentityInfo] = None
    expiration_datetime: Optional[str] = None
    has_password: bool = False
    share_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Permission":
        link = data.get("link") or {}
        granted = data.get("grantedToV2") or data.get("grantedTo")
        return cls(
            id=data.get("id", ""),
            roles=list(data.get("roles", [])),
            link_type=link.get("type"),
            link_scope=link.get("scope"),
            link_web_url=link.get("webUrl"),
            granted_to=IdentityInfo.from_dict(granted) if granted else None,
            expiration_datetime=data.get("expirationDateTime"),
            has_password=bool(data.get("hasPassword", False)),
            share_id=data.get("shareId"),
        )


@dataclass
class CopyOperation:
    """copy 요청은 202 Accepted + 모니터 URL을 반환"""
    monitor_url: Optional[str]


@dataclass
class AsyncOperationStatus:
    """비동기 작업 (copy) 진행 상태"""
    status: str
    percentage_complete: float = 0.0
    resource_id: Optional[str] = None
    operation: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AsyncOperationStatus":
        return cls(
            status=data.get("status", "unknown"),
            percentage_complete=float(data.get("percentageComplete", 0.0)),
            resource_id=data.get("resourceId"),
            operation=data.get("operation"),
        )

    def is_completed(self) -> bool:
        return self.status == "completed"

    def is_failed(self) -> bool:
        return self.status == "failed"
