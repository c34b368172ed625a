"""Source fetcher: archive downloads and git checkouts.

Public API:
    - SourceFetcher: Idempotent fetcher
    - is_checkout: Detect a git working tree
    - FetchError: Download or VCS failure
    - InvalidCheckoutError: Destination exists but is not a checkout
"""

from .exceptions import FetchError, InvalidCheckoutError
from .source_fetcher import SourceFetcher, is_checkout

__all__ = [
    "SourceFetcher",
    "is_checkout",
    "FetchError",
    "InvalidCheckoutError",
]
