"""Custom exceptions for the fetcher module."""

from pathlib import Path
from typing import Optional

from provisioner.exceptions import ProvisionError


class FetchError(ProvisionError):
    """Failed to acquire source code or data.

    Attributes:
        url: The archive or repository URL.
        output: Captured VCS output, if a command failed.
    """

    def __init__(self, message: str, url: Optional[str] = None, output: str = ""):
        super().__init__(message)
        self.url = url
        self.output = output


class InvalidCheckoutError(FetchError):
    """The destination exists but is not a checkout.

    Never resolved automatically: removing it requires force_clean.

    Attributes:
        path: The offending directory.
    """

    def __init__(self, path: Path, url: Optional[str] = None):
        super().__init__(
            f"{path} exists but is not a git checkout; "
            "rerun with --force-clean to replace it",
            url=url,
        )
        self.path = path
