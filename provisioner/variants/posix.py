"""POSIX variant: apt packages plus the native source chain."""

from provisioner.config import POSIX, ProvisionConfig
from provisioner.installer import AptInstaller
from provisioner.preflight import Prerequisite
from provisioner.steps import (
    AllOf,
    AnyOf,
    ArchiveOrigin,
    BuildSystem,
    CommandAvailable,
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
    "build-essential",
    "gcc",
    "g++",
    "make",
    "cmake",
    "git",
    "pkg-config",
    "autoconf",
    "automake",
    "libtool",
    "curl",
    "wget",
)
IMAGE_LIBRARIES = (
    "zlib1g-dev",
    "libjpeg-dev",
    "libpng-dev",
    "libtiff-dev",
    "libwebp-dev",
    "libopenexr-dev",
)
TESSERACT_DEPENDENCIES = (
    "libicu-dev",
    "libpango1.0-dev",
    "libcairo2-dev",
)
OPENCV_DEPENDENCIES = (
    "libgtk2.0-dev",
    "libtbb-dev",
    "libv4l-dev",
    "libeigen3-dev",
    "python3-dev",
    "python3-numpy",
)
OPENALPR_DEPENDENCIES = (
    "libcurl4-openssl-dev",
    "liblog4cplus-dev",
)
OPTIONAL_TOOLS = (
    "openjdk-17-jdk",
    "python3-pip",
    "qtbase5-dev",
    "libboost-all-dev",
    "gstreamer1.0-plugins-base",
    "freeglut3-dev",
    "mesa-common-dev",
    "libgl1-mesa-dev",
    "libclang-dev",
    "beanstalkd",
)

PROBES = (
    Probe("cmake", ("cmake", "--version")),
    Probe("tesseract", ("tesseract", "--version")),
    Probe("opencv", ("pkg-config", "--modversion", "opencv4")),
    Probe("openalpr", ("alpr", "--version")),
)

PREREQUISITES = (
    Prerequisite("package manager", ("apt-get",)),
    Prerequisite("version control client", ("git",), provided_by="build-toolchain"),
    Prerequisite("C/C++ compiler", ("g++", "c++"), provided_by="build-toolchain"),
    Prerequisite("make", ("make",), provided_by="build-toolchain"),
    Prerequisite("cmake", ("cmake",), provided_by="build-toolchain"),
)


def _package_step(name, packages, failure_mode, description, depends_on=()):
    return Step(
        name=name,
        kind=StepKind.PACKAGE_INSTALL,
        failure_mode=failure_mode,
        depends_on=tuple(depends_on),
        check=PackagesInstalled(tuple(packages)),
        packages=tuple(packages),
        description=description,
    )


def build_steps(config: ProvisionConfig) -> tuple[Step, ...]:
    """Return the POSIX step list for ``config``."""
    src = config.src_dir
    prefix = config.prefix
    include = prefix / "include"

    steps = [
        _package_step(
            "build-toolchain", BUILD_TOOLCHAIN, FailureMode.FATAL,
            "Compilers, build systems and git",
        ),
        _package_step(
            "image-libraries", IMAGE_LIBRARIES, FailureMode.FATAL,
            "Image codec headers for Leptonica and OpenCV",
            depends_on=["build-toolchain"],
        ),
        _package_step(
            "tesseract-dependencies", TESSERACT_DEPENDENCIES, FailureMode.FATAL,
            "Text rendering libraries for Tesseract",
            depends_on=["build-toolchain"],
        ),
        _package_step(
            "opencv-dependencies", OPENCV_DEPENDENCIES, FailureMode.FATAL,
            "GUI, threading and linear algebra libraries for OpenCV",
            depends_on=["build-toolchain"],
        ),
        _package_step(
            "openalpr-dependencies", OPENALPR_DEPENDENCIES, FailureMode.FATAL,
            "HTTP and logging libraries for OpenALPR",
            depends_on=["build-toolchain"],
        ),
        _package_step(
            "optional-tools", OPTIONAL_TOOLS, FailureMode.RECOVERABLE,
            "Extra development tools not needed by the source builds",
        ),
        Step(
            name="jasper",
            kind=StepKind.SOURCE_BUILD,
            failure_mode=FailureMode.FATAL,
            depends_on=("build-toolchain", "image-libraries"),
            check=PathExists(include / "jasper" / "jasper.h"),
            artifact=SourceArtifact(
                origin=RepositoryOrigin(sources.JASPER_URL),
                local_path=src / "jasper",
                build_system=BuildSystem.CMAKE,
                build_options=({
                    "CMAKE_BUILD_TYPE": "Release",
                    "CMAKE_INSTALL_PREFIX": str(prefix),
                    "JAS_ENABLE_DOC": False,
                },),
            ),
            description="JPEG-2000 codec library",
        ),
        Step(
            name="leptonica",
            kind=StepKind.SOURCE_BUILD,
            failure_mode=FailureMode.FATAL,
            depends_on=("jasper",),
            check=PathExists(include / "leptonica" / "allheaders.h"),
            artifact=SourceArtifact(
                origin=RepositoryOrigin(sources.LEPTONICA_URL, depth=1, refresh=True),
                local_path=src / "leptonica",
                build_system=BuildSystem.AUTOTOOLS,
                build_options=({
                    "prefix": str(prefix),
                    "disable-shared": True,
                    "with-zlib": True,
                    "with-jpeg": True,
                    "with-libwebp": True,
                    "with-libtiff": True,
                    "with-libpng": True,
                    "with-jasper": True,
                },),
            ),
            description="Image processing library used by Tesseract",
        ),
        Step(
            name="tesseract",
            kind=StepKind.SOURCE_BUILD,
            failure_mode=FailureMode.FATAL,
            depends_on=("leptonica", "tesseract-dependencies"),
            check=AllOf(
                PathExists(prefix / "bin" / "tesseract"),
                PathExists(include / "tesseract" / "baseapi.h"),
            ),
            artifact=SourceArtifact(
                origin=RepositoryOrigin(sources.TESSERACT_URL),
                local_path=src / "tesseract",
                build_system=BuildSystem.AUTOTOOLS,
                build_options=({"prefix": str(prefix)},),
            ),
            description="OCR engine",
        ),
    ]

    for lang in config.tessdata_langs:
        traineddata = config.tessdata_dir / f"{lang}.traineddata"
        staged = src / "tessdata" / f"{lang}.traineddata"
        steps.append(
            Step(
                name=f"tessdata-{lang}",
                kind=StepKind.SOURCE_BUILD,
                failure_mode=FailureMode.RECOVERABLE,
                depends_on=("tesseract",),
                check=PathExists(traineddata),
                artifact=SourceArtifact(
                    origin=ArchiveOrigin(sources.TESSDATA_URL.format(lang=lang), version="main"),
                    local_path=staged,
                    install_path=traineddata,
                ),
                description=f"Tesseract language data for '{lang}'",
            )
        )

    contrib = src / "opencv_contrib"
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
            depends_on=("image-libraries", "opencv-dependencies", "opencv-contrib", "tesseract"),
            check=PathExists(include / "opencv4" / "opencv2" / "core.hpp"),
            artifact=SourceArtifact(
                origin=RepositoryOrigin(sources.OPENCV_URL, depth=1),
                local_path=src / "opencv",
                build_system=BuildSystem.CMAKE,
                build_options=({
                    "CMAKE_BUILD_TYPE": "Release",
                    "CMAKE_INSTALL_PREFIX": str(prefix),
                    "OPENCV_EXTRA_MODULES_PATH": str(contrib / "modules"),
                },),
            ),
            description="Computer vision library",
        ),
        Step(
            name="openalpr",
            kind=StepKind.SOURCE_BUILD,
            failure_mode=FailureMode.FATAL,
            depends_on=("opencv", "tesseract", "openalpr-dependencies"),
            check=AnyOf(PathExists(prefix / "bin" / "alpr"), CommandAvailable("alpr")),
            artifact=SourceArtifact(
                origin=RepositoryOrigin(sources.OPENALPR_URL),
                local_path=src / "openalpr",
                build_system=BuildSystem.CMAKE,
                source_subdir="src",
                build_options=(
                    {
                        "CMAKE_CXX_FLAGS": "-std=c++11",
                        "CMAKE_INSTALL_PREFIX": str(prefix),
                        "CMAKE_INSTALL_SYSCONFDIR": "/etc",
                        "Tesseract_INCLUDE_DIRS": str(include / "tesseract"),
                        "Tesseract_LIBRARIES": str(prefix / "lib" / "libtesseract.so"),
                    },
                    {
                        "CMAKE_CXX_FLAGS": "-std=c++17",
                        "CMAKE_INSTALL_PREFIX": str(prefix),
                        "CMAKE_INSTALL_SYSCONFDIR": "/etc",
                    },
                ),
            ),
            description="License plate recognition library and alpr CLI",
        ),
    ]
    return tuple(steps)


def posix_variant(config: ProvisionConfig) -> Variant:
    return Variant(
        name=POSIX,
        steps=build_steps(config),
        probes=PROBES,
        installer_factory=AptInstaller,
        linker_cache_command=("ldconfig",),
        prerequisites=PREREQUISITES,
    )
