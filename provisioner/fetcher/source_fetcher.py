"""SourceFetcher - idempotent archive downloads and repository checkouts."""

import logging
import os
import shutil
import tarfile
import tempfile
import urllib.request
import zipfile
from pathlib import Path
from typing import Callable, Optional

from provisioner.steps.models import ArchiveOrigin, RepositoryOrigin, SourceArtifact
from provisioner.system.runner import CommandRunner

from .exceptions import FetchError, InvalidCheckoutError

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT_SECONDS = 300
CHUNK_SIZE = 64 * 1024


def is_checkout(path: Path) -> bool:
    """Return True if ``path`` holds a git working tree."""
    return (path / ".git").exists()


class SourceFetcher:
    """Acquires sources, treating whatever is already on disk as done.

    Existing checkouts are only removed when ``force_clean`` is set;
    anything ambiguous is reported as an error instead of deleted.

    Example:
        fetcher = SourceFetcher(SubprocessRunner())
        fetcher.fetch_repository(
            "https://github.com/DanBloomberg/leptonica.git",
            Path("~/src/leptonica").expanduser(),
            depth=1,
        )
    """

    def __init__(
        self,
        runner: CommandRunner,
        force_clean: bool = False,
        opener: Callable = urllib.request.urlopen,
    ):
        self._runner = runner
        self._force_clean = force_clean
        self._opener = opener

    @property
    def force_clean(self) -> bool:
        return self._force_clean

    def fetch(self, artifact: SourceArtifact) -> None:
        """Acquire an artifact according to its origin.

        Raises:
            FetchError: Download, clone or update failed.
        """
        origin = artifact.origin
        if isinstance(origin, ArchiveOrigin):
            self.fetch_archive(origin.url, artifact.local_path, extract=origin.extract)
        elif isinstance(origin, RepositoryOrigin):
            self.fetch_repository(
                origin.url,
                artifact.local_path,
                depth=origin.depth,
                refresh=origin.refresh,
                branch=origin.branch,
            )
        else:
            raise FetchError(f"Unsupported origin type: {type(origin).__name__}")

    def fetch_archive(self, url: str, dest: Path, extract: bool = False) -> None:
        """Download ``url`` to ``dest`` unless it is already there.

        Args:
            url: File to download.
            dest: Target file, or target directory when extracting.
            extract: Unpack a tar or zip archive into ``dest``.

        Raises:
            FetchError: Network, filesystem or archive format error.
        """
        dest = Path(dest)
        if extract:
            if dest.is_dir() and any(dest.iterdir()):
                logger.info("Archive already extracted at %s", dest)
                return
        elif dest.exists():
            logger.info("Archive already present at %s", dest)
            return

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FetchError(f"Cannot create {dest.parent}: {e}", url=url) from e

        tmp_path: Optional[Path] = None
        staging: Optional[Path] = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", dir=dest.parent)
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, "wb") as out:
                self._download(url, out)
            if extract:
                # Only a complete extraction may ever appear at dest
                staging = Path(tempfile.mkdtemp(prefix=f".{dest.name}.", dir=dest.parent))
                self._extract(tmp_path, staging, url)
                if dest.is_dir():
                    dest.rmdir()
                staging.replace(dest)
                staging = None
            else:
                tmp_path.replace(dest)
        except (tarfile.TarError, zipfile.BadZipFile, EOFError) as e:
            raise FetchError(f"Failed to extract {url}: {e}", url=url) from e
        except OSError as e:
            raise FetchError(f"Failed to download {url}: {e}", url=url) from e
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            if staging is not None:
                shutil.rmtree(staging, ignore_errors=True)

        logger.info("Downloaded %s to %s", url, dest)

    def _download(self, url: str, out) -> None:
        logger.info("Downloading %s", url)
        with self._opener(url, timeout=DOWNLOAD_TIMEOUT_SECONDS) as response:
            while True:
                chunk = response.read(CHUNK_SIZE)
                if not chunk:
                    break
                out.write(chunk)

    @staticmethod
    def _extract(archive: Path, dest: Path, url: str) -> None:
        if tarfile.is_tarfile(archive):
            with tarfile.open(archive) as tar:
                if hasattr(tarfile, "data_filter"):
                    tar.extractall(dest, filter="data")
                else:
                    tar.extractall(dest)
        elif zipfile.is_zipfile(archive):
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(dest)
        else:
            raise FetchError(f"{url} is neither a tar nor a zip archive", url=url)

    def fetch_repository(
        self,
        url: str,
        dest: Path,
        depth: Optional[int] = None,
        refresh: bool = False,
        branch: Optional[str] = None,
    ) -> None:
        """Clone ``url`` into ``dest``, or reuse an existing checkout.

        Args:
            url: Repository URL.
            dest: Checkout directory.
            depth: Shallow clone depth.
            refresh: Fast-forward an existing checkout.
            branch: Branch or tag to clone.

        Raises:
            InvalidCheckoutError: ``dest`` exists but is not a checkout
                and force_clean is off.
            FetchError: git failed.
        """
        dest = Path(dest)
        if dest.exists():
            if self._force_clean:
                logger.info("Removing existing directory %s", dest)
                shutil.rmtree(dest)
            elif not is_checkout(dest):
                raise InvalidCheckoutError(dest, url=url)
            elif refresh:
                self._pull(url, dest)
                return
            else:
                logger.info("Checkout already present at %s", dest)
                return

        self._clone(url, dest, depth, branch)

    def _clone(self, url: str, dest: Path, depth: Optional[int], branch: Optional[str]) -> None:
        args = ["git", "clone"]
        if depth:
            args += ["--depth", str(depth)]
        if branch:
            args += ["--branch", branch]
        args += [url, str(dest)]

        dest.parent.mkdir(parents=True, exist_ok=True)
        result = self._runner.run(args)
        if not result.ok:
            raise FetchError(f"git clone of {url} failed", url=url, output=result.output)
        logger.info("Cloned %s into %s", url, dest)

    def _pull(self, url: str, dest: Path) -> None:
        logger.info("Updating checkout at %s", dest)
        result = self._runner.run(["git", "-C", str(dest), "pull", "--ff-only"])
        if not result.ok:
            raise FetchError(f"git pull in {dest} failed", url=url, output=result.output)
