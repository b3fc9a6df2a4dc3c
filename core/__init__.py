"""
Core Module - token provider abstractions

onedrive_graph 클라이언트가 특정 인증 구현에 묶이지 않도록 분리.
"""

from .protocols import TokenProviderProtocol
from .token_provider import StaticTokenProvider

__all__ = ['TokenProviderProtocol', 'StaticTokenProvider']
