"""Windows variant: Chocolatey packages, every library built with CMake."""

from provisioner.config import WINDOWS, ProvisionConfig
from provisioner.installer import ChocoInstaller
from provisioner.preflight import Prerequisite
from provisioner.steps import (
    ArchiveOrigin,
    BuildSystem,
    FailureMode,
    PackagesInstalled,
    PathExists,
    RepositoryOrigin,
    SourceArtifact,
    Step,
    StepKind,
)
from provisioner.verification import Probe

from . import sources
from .models import Variant

BUILD_TOOLCHAIN = (
    "git",
    "cmake",
    "visualstudio2022buildtools",
    "visualstudio2022-workload-vctools",
)
OPTIONAL_TOOLS = (
    "7zip",
    "wget",
    "pkgconfiglite",
)

PROBES = (
    Probe("cmake", ("cmake", "--version")),
    Probe("tesseract", ("tesseract", "--version")),
    Probe("opencv", ("opencv_version",)),
    Probe("openalpr", ("alpr", "--version")),
)

PREREQUISITES = (
    Prerequisite("package manager", ("choco",)),
    Prerequisite("version control client", ("git",), provided_by="build-toolchain"),
    Prerequisite("cmake", ("cmake",), provided_by="build-toolchain"),
)


def _cmake_artifact(local_path, url, config, depth=None, refresh=False, **options):
    base = {
        "CMAKE_INSTALL_PREFIX": config.prefix.as_posix(),
        "CMAKE_PREFIX_PATH": config.prefix.as_posix(),
    }
    return SourceArtifact(
        origin=RepositoryOrigin(url, depth=depth, refresh=refresh),
        local_path=local_path,
        build_system=BuildSystem.CMAKE,
        build_options=({**base, **options},),
        refresh_linker_cache=False,
    )


def build_steps(config: ProvisionConfig) -> tuple[Step, ...]:
    """Return the Windows step list for ``config``."""
    src = config.src_dir
    prefix = config.prefix
    include = prefix / "include"
    contrib = src / "opencv_contrib"

    steps = [
        Step(
            name="build-toolchain",
            kind=StepKind.PACKAGE_INSTALL,
            failure_mode=FailureMode.FATAL,
            check=PackagesInstalled(BUILD_TOOLCHAIN),
            packages=BUILD_TOOLCHAIN,
            description="MSVC build tools, CMake and git",
        ),
        Step(
            name="optional-tools",
            kind=StepKind.PACKAGE_INSTALL,
            failure_mode=FailureMode.RECOVERABLE,
            check=PackagesInstalled(OPTIONAL_TOOLS),
            packages=OPTIONAL_TOOLS,
            description="Archive and download helpers",
        ),
        Step(
            name="jasper",
            kind=StepKind.SOURCE_BUILD,
            failure_mode=FailureMode.FATAL,
            depends_on=("build-toolchain",),
            check=PathExists(include / "jasper" / "jasper.h"),
            artifact=_cmake_artifact(
                src / "jasper", sources.JASPER_URL, config, JAS_ENABLE_DOC=False
            ),
            description="JPEG-2000 codec library",
        ),
        Step(
            name="leptonica",
            kind=StepKind.SOURCE_BUILD,
            failure_mode=FailureMode.FATAL,
            depends_on=("jasper",),
            check=PathExists(include / "leptonica" / "allheaders.h"),
            artifact=_cmake_artifact(
                src / "leptonica", sources.LEPTONICA_URL, config,
                depth=1, refresh=True, SW_BUILD=False, BUILD_PROG=False,
            ),
            description="Image processing library used by Tesseract",
        ),
        Step(
            name="tesseract",
            kind=StepKind.SOURCE_BUILD,
            failure_mode=FailureMode.FATAL,
            depends_on=("leptonica",),
            check=PathExists(prefix / "bin" / "tesseract.exe"),
            artifact=_cmake_artifact(
                src / "tesseract", sources.TESSERACT_URL, config,
                SW_BUILD=False, BUILD_TRAINING_TOOLS=False,
            ),
            description="OCR engine",
        ),
    ]

    for lang in config.tessdata_langs:
        traineddata = config.tessdata_dir / f"{lang}.traineddata"
        steps.append(
            Step(
                name=f"tessdata-{lang}",
                kind=StepKind.SOURCE_BUILD,
                failure_mode=FailureMode.RECOVERABLE,
                depends_on=("tesseract",),
                check=PathExists(traineddata),
                artifact=SourceArtifact(
                    origin=ArchiveOrigin(sources.TESSDATA_URL.format(lang=lang), version="main"),
                    local_path=traineddata,
                ),
                description=f"Tesseract language data for '{lang}'",
            )
        )

    openalpr = _cmake_artifact(src / "openalpr", sources.OPENALPR_URL, config)
    steps += [
        Step(
            name="opencv-contrib",
            kind=StepKind.SOURCE_BUILD,
            failure_mode=FailureMode.FATAL,
            depends_on=("build-toolchain",),
            check=PathExists(contrib / "modules"),
            artifact=SourceArtifact(
                origin=RepositoryOrigin(sources.OPENCV_CONTRIB_URL, depth=1),
                local_path=contrib,
            ),
            description="OpenCV extra modules source tree",
        ),
        Step(
            name="opencv",
            kind=StepKind.SOURCE_BUILD,
            failure_mode=FailureMode.FATAL,
            depends_on=("opencv-contrib", "tesseract"),
            check=PathExists(include / "opencv2" / "core.hpp"),
            artifact=_cmake_artifact(
                src / "opencv", sources.OPENCV_URL, config, depth=1,
                OPENCV_EXTRA_MODULES_PATH=(contrib / "modules").as_posix(),
            ),
            description="Computer vision library",
        ),
        Step(
            name="openalpr",
            kind=StepKind.SOURCE_BUILD,
            failure_mode=FailureMode.FATAL,
            depends_on=("opencv", "tesseract"),
            check=PathExists(prefix / "bin" / "alpr.exe"),
            artifact=SourceArtifact(
                origin=openalpr.origin,
                local_path=openalpr.local_path,
                build_system=BuildSystem.CMAKE,
                source_subdir="src",
                build_options=(
                    {
                        **openalpr.build_options[0],
                        "Tesseract_INCLUDE_DIRS": (include / "tesseract").as_posix(),
                    },
                    openalpr.build_options[0],
                ),
                refresh_linker_cache=False,
            ),
            description="License plate recognition library and alpr CLI",
        ),
    ]
    return tuple(steps)


def windows_variant(config: ProvisionConfig) -> Variant:
    return Variant(
        name=WINDOWS,
        steps=build_steps(config),
        probes=PROBES,
        installer_factory=ChocoInstaller,
        cmake_config="Release",
        prerequisites=PREREQUISITES,
    )
