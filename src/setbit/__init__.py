"""setbit feature flag client library."""

from .cache import FlagCache, make_cache_key
from .client import FlagClientProtocol
from .config import DEFAULT_API_URL, DEFAULT_CACHE_TTL_SECONDS, SetBitConfig, load_config
from .exceptions import SetBitError, SetBitErrorCodes
from .identity import USER_ID_STORAGE_KEY, IdentityProvider
from .logger import SdkLogger
from .memory import InMemoryFlagClient
from .models import FlagResult, TrackEvent
from .sdk import SetBitClient
from .storage import FileStorage, InMemoryStorage, Storage
from .transport import HttpTransport

__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_CACHE_TTL_SECONDS",
    "USER_ID_STORAGE_KEY",
    "FileStorage",
    "FlagCache",
    "FlagClientProtocol",
    "FlagResult",
    "HttpTransport",
    "IdentityProvider",
    "InMemoryFlagClient",
    "InMemoryStorage",
    "SdkLogger",
    "SetBitClient",
    "SetBitConfig",
    "SetBitError",
    "SetBitErrorCodes",
    "Storage",
    "TrackEvent",
    "load_config",
    "make_cache_key",
]
