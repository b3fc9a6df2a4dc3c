"""
Core Protocols - Graph 클라이언트가 의존하는 인증 capability 정의

현재 정의:
    - TokenProviderProtocol: 사용자별 유효한 액세스 토큰을 돌려주는 인터페이스

사용 예시:
    # 테스트용 Mock 주입
    provider = AsyncMock(spec=TokenProviderProtocol)
    client = GraphOneDriveClient(token_provider=provider)

    # 고정 토큰 사용
    client = GraphOneDriveClient(token_provider=StaticTokenProvider("eyJ..."))
"""

from typing import Protocol, Optional, runtime_checkable


@runtime_checkable
class TokenProviderProtocol(Protocol):
    """
    Access token source used by GraphOneDriveClient.

    Implementations own token acquisition and refresh; the client only asks
    for a token right before each authenticated request.
    """

    async def validate_and_refresh_token(self, user_email: str) -> Optional[str]:
        """
        Return a usable access token for the user, refreshing it if needed

        Args:
            user_email: user the token belongs to

        Returns:
            Bearer token, or None when the user has no usable token
        """
        ...

    async def close(self) -> None:
        """Release provider resources"""
        ...
