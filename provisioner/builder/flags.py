"""Render configuration candidates as command-line flags."""

from typing import Mapping

from provisioner.steps.models import BuildOptionValue


def autotools_flags(options: Mapping[str, BuildOptionValue]) -> list[str]:
    """Render options for ./configure.

    ``{"prefix": "/usr/local", "disable-shared": True, "with-x": False}``
    becomes ``["--prefix=/usr/local", "--disable-shared"]``.
    """
    flags = []
    for key, value in options.items():
        if value is False:
            continue
        if value is True or value is None:
            flags.append(f"--{key}")
        else:
            flags.append(f"--{key}={value}")
    return flags


def cmake_flags(options: Mapping[str, BuildOptionValue]) -> list[str]:
    """Render options as -D cache definitions. Booleans become ON/OFF."""
    flags = []
    for key, value in options.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "ON" if value else "OFF"
        flags.append(f"-D{key}={value}")
    return flags
