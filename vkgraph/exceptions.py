"""
Error taxonomy for discovery (remote API) and persistence (graph store).
"""
from typing import Optional


class SocialGraphError(Exception):
    """Base class for all vkgraph errors."""
    pass


# =============================================================================
# Remote fetch errors
# =============================================================================

class FetchError(SocialGraphError):
    """Raised when a remote VK API call cannot produce a usable result."""
    pass


class TransportError(FetchError):
    """Network-level failure: connection refused, timeout, broken stream."""
    pass


class UpstreamError(FetchError):
    """Non-success HTTP status or a VK error envelope."""

    def __init__(self, code: int, message: str, method: Optional[str] = None):
        self.code = code
        self.message = message
        self.method = method
        prefix = f"{method}: " if method else ""
        super().__init__(f"{prefix}VK error {code}: {message}")


class NotFound(FetchError):
    """The API answered successfully but returned nothing for the identity."""
    pass


class DecodeError(FetchError):
    """Response body is not JSON or lacks the expected structure."""
    pass


# =============================================================================
# Store errors
# =============================================================================

class StoreWriteError(SocialGraphError):
    """A write transaction against the graph store failed."""
    pass
