"""
OneDrive Errors
Graph 요청 / 청크 업로드 실패를 구분하는 예외 계층

    OneDriveError
    ├── AuthenticationError
    ├── GraphApiError
    │   ├── SessionCreationError
    │   └── ChunkTransferError
    ├── CallerContractViolation (ValueError)
    │   ├── FragmentSizeError
    │   ├── ChunkAlignmentError
    │   └── IncompleteUploadError
    └── PayloadValidationError
"""

import json
from typing import Optional, Dict, Any


class OneDriveError(Exception):
    """Base class for every error raised by onedrive_graph"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "error_type": type(self).__name__}


class AuthenticationError(OneDriveError):
    """No usable access token for the user"""

    def __init__(self, user_email: str):
        super().__init__(f"No access token available for {user_email}; login required")
        self.user_email = user_email


class GraphApiError(OneDriveError):
    """
    Non-success Graph response or transport failure

    status is None when the request never produced an HTTP response
    (connection error, timeout).
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[str] = None,
    ):
        super().__init__(message)
        self.status = status
        self.code = code
        self.details = details

    @staticmethod
    def parse_error_body(body: Optional[str]) -> Dict[str, Optional[str]]:
        """
        Graph 오류 envelope 파싱: {"error": {"code": ..., "message": ...}}

        Args:
            body: raw response text

        Returns:
            dict with "code" and "message" (None when absent)
        """
        if not body:
            return {"code": None, "message": None}
        try:
            payload = json.loads(body)
        except ValueError:
            return {"code": None, "message": None}
        error = payload.get("error") if isinstance(payload, dict) else None
        if not isinstance(error, dict):
            return {"code": None, "message": None}
        return {"code": error.get("code"), "message": error.get("message")}

    @classmethod
    def from_response(cls, status: int, body: Optional[str], context: str, **kwargs) -> "GraphApiError":
        parsed = cls.parse_error_body(body)
        message = f"{context} failed: {status}"
        if parsed["message"]:
            message = f"{message} - {parsed['message']}"
        return cls(message, status=status, code=parsed["code"], details=body, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({"status": self.status, "code": self.code, "details": self.details})
        return result


class SessionCreationError(GraphApiError):
    """Upload session request rejected, or its response carried no uploadUrl"""


class ChunkTransferError(GraphApiError):
    """One byte-range PUT against the upload session failed"""

    def __init__(
        self,
        message: str,
        start_byte: int,
        end_byte: int,
        file_size: int,
        status: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[str] = None,
    ):
        super().__init__(message, status=status, code=code, details=details)
        self.start_byte = start_byte
        self.end_byte = end_byte
        self.file_size = file_size

    @property
    def byte_range(self):
        return (self.start_byte, self.end_byte)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({
            "start_byte": self.start_byte,
            "end_byte": self.end_byte,
            "file_size": self.file_size,
        })
        return result


class CallerContractViolation(OneDriveError, ValueError):
    """Input can never succeed as given; retrying without changes is pointless"""


class FragmentSizeError(CallerContractViolation):
    """Supplied block exceeds the per-request fragment limit"""

    def __init__(self, block_length: int, max_fragment_size: int, start_byte: int):
        super().__init__(
            f"Block of {block_length} bytes at offset {start_byte} exceeds "
            f"the maximum fragment size of {max_fragment_size} bytes"
        )
        self.block_length = block_length
        self.max_fragment_size = max_fragment_size
        self.start_byte = start_byte


class ChunkAlignmentError(CallerContractViolation):
    """Non-final chunk length is not a multiple of the alignment unit"""

    def __init__(self, chunk_length: int, alignment: int, start_byte: int):
        super().__init__(
            f"Chunk of {chunk_length} bytes at offset {start_byte} is not a "
            f"multiple of {alignment} bytes and is not the final chunk"
        )
        self.chunk_length = chunk_length
        self.alignment = alignment
        self.start_byte = start_byte


class IncompleteUploadError(CallerContractViolation):
    """Block sequence ended before the declared file size was transferred"""

    def __init__(self, transferred: int, file_size: int):
        super().__init__(
            f"Block sequence ended after {transferred} of {file_size} bytes"
        )
        self.transferred = transferred
        self.file_size = file_size


class PayloadValidationError(OneDriveError):
    """Response body is not in the expected shape"""
