"""
Chat provider abstraction layer.

All provider-specific logic (payload shape, SDK calls, error codes) lives in
provider implementations. The chat service depends only on the ChatProvider
interface and on ProviderError.
"""

from chat_relay.providers.base import ChatProvider, ProviderReply
from chat_relay.providers.errors import ErrorKind, ProviderError
from chat_relay.providers.factory import get_provider, is_provider_configured

__all__ = [
    "ChatProvider",
    "ErrorKind",
    "ProviderError",
    "ProviderReply",
    "get_provider",
    "is_provider_configured",
]
