"""
Graph OneDrive URL Builder
driveItem 엔드포인트 경로 생성

아이템 지정 방식:
    - item_id:   {drive_root}/items/{id}[/{action}]
    - file_path: {drive_root}/root:/{path}:[/{action}]
    - 둘 다 없음: {drive_root}/root[/{action}]
"""

from typing import Optional
from urllib.parse import quote


class GraphOneDriveUrlBuilder:
    """
    Drive-relative endpoint builder

    Returned endpoints are relative to the Graph base URL, so the client
    prefixes them with GRAPH_BASE_URL.
    """

    def __init__(self, drive_root: str = "/me/drive"):
        """
        Args:
            drive_root: "/me/drive", "/users/{id}/drive", "/drives/{drive-id}" ...
        """
        self.drive_root = "/" + drive_root.strip("/")

    @staticmethod
    def encode_path(path: str) -> str:
        """Strip surrounding slashes and percent-encode each segment"""
        segments = [s for s in path.strip("/").split("/") if s]
        return "/".join(quote(s, safe="") for s in segments)

    def item(
        self,
        item_id: Optional[str] = None,
        file_path: Optional[str] = None,
        action: Optional[str] = None,
    ) -> str:
        """
        아이템 엔드포인트

        Args:
            item_id: driveItem ID (file_path보다 우선)
            file_path: 드라이브 루트 기준 경로 (예: Documents/report.docx)
            action: 하위 리소스 / 액션 (children, content, copy ...)

        Returns:
            엔드포인트 경로
        """
        if item_id:
            base = f"{self.drive_root}/items/{quote(item_id, safe='!')}"
            return f"{base}/{action}" if action else base

        encoded = self.encode_path(file_path) if file_path else ""
        if not encoded:
            base = f"{self.drive_root}/root"
            return f"{base}/{action}" if action else base

        base = f"{self.drive_root}/root:/{encoded}:"
        return f"{base}/{action}" if action else base

    def drive(self) -> str:
        return self.drive_root

    def children(
        self,
        folder_id: Optional[str] = None,
        folder_path: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> str:
        endpoint = self.item(folder_id, folder_path, "children")
        if limit:
            endpoint += f"?$top={limit}"
        return endpoint

    def content(
        self,
        item_id: Optional[str] = None,
        file_path: Optional[str] = None,
        conflict_behavior: Optional[str] = None,
    ) -> str:
        endpoint = self.item(item_id, file_path, "content")
        if conflict_behavior:
            endpoint += f"?@microsoft.graph.conflictBehavior={conflict_behavior}"
        return endpoint

    def child_content(
        self,
        parent_id: str,
        file_name: str,
        conflict_behavior: Optional[str] = None,
    ) -> str:
        """PUT /items/{parent-id}:/{filename}:/content"""
        endpoint = f"{self.item(parent_id)}:/{quote(file_name, safe='')}:/content"
        if conflict_behavior:
            endpoint += f"?@microsoft.graph.conflictBehavior={conflict_behavior}"
        return endpoint

    def upload_session(
        self,
        file_path: Optional[str] = None,
        parent_id: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> str:
        """
        createUploadSession 엔드포인트

        Args:
            file_path: 드라이브 루트 기준 대상 경로
            parent_id: 부모 폴더 ID (file_name 필요)
            file_name: parent_id 사용 시 파일 이름

        Returns:
            엔드포인트 경로
        """
        if parent_id:
            if not file_name:
                raise ValueError("file_name is required when uploading by parent_id")
            return f"{self.item(parent_id)}:/{quote(file_name, safe='')}:/createUploadSession"
        if not file_path or not self.encode_path(file_path):
            raise ValueError("file_path or parent_id is required for an upload session")
        return self.item(file_path=file_path, action="createUploadSession")

    def search(self, query: str, limit: Optional[int] = None) -> str:
        """root/search(q='...') - 작은따옴표는 두 번 써서 이스케이프"""
        escaped = query.replace("'", "''")
        endpoint = f"{self.drive_root}/root/search(q='{quote(escaped, safe='')}')"
        if limit:
            endpoint += f"?$top={limit}"
        return endpoint

    def permission(self, item_id: str, permission_id: Optional[str] = None) -> str:
        endpoint = self.item(item_id, action="permissions")
        if permission_id:
            endpoint += f"/{quote(permission_id, safe='')}"
        return endpoint
