"""
Upload session wire models
Pydantic 모델로 세션 응답 검증 및 createUploadSession 요청 본문 생성
"""

from datetime import datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field

from .onedrive_types import ConflictBehavior


class UploadSession(BaseModel):
    """createUploadSession 응답 - 세션 수명 동안 변경되지 않음"""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='ignore')

    upload_url: str = Field(
        ...,
        alias="uploadUrl",
        min_length=1,
        description="청크 PUT 대상 URL (사전 인증됨, Authorization 헤더 불필요)",
    )
    expiration_date_time: Optional[datetime] = Field(
        None,
        alias="expirationDateTime",
        description="세션 만료 시각",
    )
    next_expected_ranges: List[str] = Field(
        default_factory=list,
        alias="nextExpectedRanges",
    )


class UploadSessionStatus(BaseModel):
    """업로드 세션 상태 조회(GET uploadUrl) 또는 중간 청크 응답"""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    expiration_date_time: Optional[datetime] = Field(None, alias="expirationDateTime")
    next_expected_ranges: List[str] = Field(default_factory=list, alias="nextExpectedRanges")

    @property
    def next_expected_offset(self) -> Optional[int]:
        """First byte the service still expects, e.g. "327680-" -> 327680"""
        if not self.next_expected_ranges:
            return None
        return int(self.next_expected_ranges[0].split("-")[0])


class UploadItemInfo(BaseModel):
    """업로드할 아이템 메타데이터 (호출자 입력, 불변)"""

    model_config = ConfigDict(frozen=True)

    file_size: int = Field(..., ge=0, description="전체 파일 크기 (bytes)")
    conflict_behavior: ConflictBehavior = Field(
        ConflictBehavior.REPLACE,
        description="동일 이름 존재 시 동작 (fail / replace / rename)",
    )
    name: Optional[str] = Field(None, description="파일 이름")
    description: Optional[str] = None
    file_system_info: Optional[Dict[str, Any]] = Field(
        None,
        description="createdDateTime / lastModifiedDateTime 등 클라이언트 측 타임스탬프",
    )

    def to_request_body(self) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "@microsoft.graph.conflictBehavior": self.conflict_behavior.value,
            "fileSize": self.file_size,
        }
        if self.name:
            item["name"] = self.name
        if self.description is not None:
            item["description"] = self.description
        if self.file_system_info:
            item["fileSystemInfo"] = self.file_system_info
        return {"item": item}
