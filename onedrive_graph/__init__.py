"""
OneDrive Graph Module
Microsoft Graph API를 사용한 OneDrive 클라이언트 (업로드 세션 기반 청크 업로드 포함)
"""

from .config import OneDriveSettings
from .onedrive_service import OneDriveService
from .graph_onedrive_client import GraphOneDriveClient
from .graph_onedrive_url import GraphOneDriveUrlBuilder
from .chunked_upload import (
    ChunkSequencer,
    SequencerState,
    UploadProgress,
    iter_bytes_blocks,
    iter_file_blocks,
    UPLOAD_ALIGNMENT,
    MAX_FRAGMENT_SIZE,
)
from .onedrive_types import (
    DriveInfo,
    DriveItem,
    DriveItemPage,
    Permission,
    ConflictBehavior,
    LinkType,
    LinkScope,
)
from .upload_types import UploadItemInfo, UploadSession, UploadSessionStatus
from .onedrive_errors import (
    OneDriveError,
    AuthenticationError,
    GraphApiError,
    SessionCreationError,
    ChunkTransferError,
    CallerContractViolation,
    FragmentSizeError,
    ChunkAlignmentError,
    IncompleteUploadError,
    PayloadValidationError,
)

__all__ = [
    # Service
    "OneDriveService",
    # Client
    "GraphOneDriveClient",
    "GraphOneDriveUrlBuilder",
    "OneDriveSettings",
    # Upload
    "ChunkSequencer",
    "SequencerState",
    "UploadProgress",
    "iter_bytes_blocks",
    "iter_file_blocks",
    "UPLOAD_ALIGNMENT",
    "MAX_FRAGMENT_SIZE",
    "UploadItemInfo",
    "UploadSession",
    "UploadSessionStatus",
    # Types
    "DriveInfo",
    "DriveItem",
    "DriveItemPage",
    "Permission",
    "ConflictBehavior",
    "LinkType",
    "LinkScope",
    # Errors
    "OneDriveError",
    "AuthenticationError",
    "GraphApiError",
    "SessionCreationError",
    "ChunkTransferError",
    "CallerContractViolation",
    "FragmentSizeError",
    "ChunkAlignmentError",
    "IncompleteUploadError",
    "PayloadValidationError",
]

__version__ = "1.0.0"
