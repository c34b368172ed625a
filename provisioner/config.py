"""Runtime configuration loaded from environment variables."""

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .exceptions import ConfigError

POSIX = "posix"
WINDOWS = "windows"
TARGETS = (POSIX, WINDOWS)

DEFAULT_PREFIXES = {
    POSIX: "/usr/local",
    WINDOWS: "C:/local",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def detect_target() -> str:
    """Return the built-in variant matching the host OS."""
    return WINDOWS if platform.system() == "Windows" else POSIX


def _default_use_sudo(target: str) -> bool:
    if target != POSIX:
        return False
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() != 0


def _parse_bool(variable: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(variable, f"expected a boolean, got {raw!r}")


def _parse_jobs(raw: str) -> int:
    try:
        jobs = int(raw)
    except ValueError:
        raise ConfigError("PROVISION_JOBS", f"expected an integer, got {raw!r}") from None
    if jobs < 1:
        raise ConfigError("PROVISION_JOBS", "must be at least 1")
    return jobs


@dataclass
class ProvisionConfig:
    """Settings shared by every component of a provisioning run.

    Attributes:
        target: Built-in variant name ("posix" or "windows").
        src_dir: Staging area holding source checkouts and downloads.
        prefix: Installation prefix for built libraries and tools.
        jobs: Compiler parallelism used inside a single build.
        use_sudo: Whether install and linker-cache commands are elevated.
        tessdata_langs: Tesseract language codes to download.
        tessdata_dir: Destination directory for language data files.
    """

    target: str
    src_dir: Path
    prefix: Path
    jobs: int = field(default_factory=lambda: os.cpu_count() or 1)
    use_sudo: bool = False
    tessdata_langs: tuple[str, ...] = ("spa",)
    tessdata_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.target not in TARGETS:
            raise ConfigError("target", f"unknown target {self.target!r}")
        if self.tessdata_dir is None:
            self.tessdata_dir = self.prefix / "share" / "tessdata"

    @classmethod
    def from_env(cls, target: Optional[str] = None) -> "ProvisionConfig":
        """Build a configuration from PROVISION_* environment variables.

        Args:
            target: Variant override. Defaults to the host OS.

        Environment variables:
            PROVISION_SRC_DIR: Source staging area. Defaults to ~/src.
            PROVISION_PREFIX: Install prefix. Defaults to /usr/local
                (POSIX) or C:/local (Windows).
            PROVISION_JOBS: Build parallelism. Defaults to the CPU count.
            PROVISION_USE_SUDO: Elevate install commands with sudo.
                Defaults to true on POSIX when not running as root.
            PROVISION_TESSDATA_LANGS: Comma-separated language codes.
                Defaults to "spa".
            PROVISION_TESSDATA_DIR: Language data directory.
                Defaults to <prefix>/share/tessdata.

        Raises:
            ConfigError: A variable holds an invalid value.
        """
        target = target or detect_target()
        if target not in TARGETS:
            raise ConfigError("target", f"unknown target {target!r}")

        src_dir = Path(os.getenv("PROVISION_SRC_DIR", "~/src")).expanduser()
        prefix = Path(os.getenv("PROVISION_PREFIX", DEFAULT_PREFIXES[target]))

        jobs_raw = os.getenv("PROVISION_JOBS")
        jobs = _parse_jobs(jobs_raw) if jobs_raw else (os.cpu_count() or 1)

        sudo_raw = os.getenv("PROVISION_USE_SUDO")
        if sudo_raw:
            use_sudo = _parse_bool("PROVISION_USE_SUDO", sudo_raw)
        else:
            use_sudo = _default_use_sudo(target)

        langs_raw = os.getenv("PROVISION_TESSDATA_LANGS", "spa")
        langs = tuple(lang.strip() for lang in langs_raw.split(",") if lang.strip())

        tessdata_raw = os.getenv("PROVISION_TESSDATA_DIR")
        tessdata_dir = Path(tessdata_raw) if tessdata_raw else None

        return cls(
            target=target,
            src_dir=src_dir,
            prefix=prefix,
            jobs=jobs,
            use_sudo=use_sudo,
            tessdata_langs=langs,
            tessdata_dir=tessdata_dir,
        )
