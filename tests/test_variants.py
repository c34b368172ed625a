"""Tests for the built-in POSIX and Windows variants."""

from pathlib import Path

import pytest

from provisioner.config import POSIX, WINDOWS, ProvisionConfig
from provisioner.installer import AptInstaller, ChocoInstaller
from provisioner.orchestrator import order_steps
from provisioner.steps import BuildSystem, FailureMode, StepKind
from provisioner.system import InMemorySystemState
from provisioner.variants import get_variant

from provision_test_helpers import FakeRunner


def _config(target: str, langs=("spa",)) -> ProvisionConfig:
    prefix = Path("/usr/local") if target == POSIX else Path("C:/local")
    return ProvisionConfig(
        target=target,
        src_dir=Path("/home/user/src"),
        prefix=prefix,
        jobs=4,
        tessdata_langs=langs,
    )


@pytest.mark.parametrize("target", [POSIX, WINDOWS])
def test_step_graph_is_valid(target):
    variant = get_variant(target, _config(target))
    ordered = [step.name for step in order_steps(variant.steps)]

    assert ordered[0] == "build-toolchain"
    assert ordered.index("jasper") < ordered.index("leptonica") < ordered.index("tesseract")
    assert ordered.index("opencv-contrib") < ordered.index("opencv") < ordered.index("openalpr")
    assert ordered.index("tesseract") < ordered.index("tessdata-spa")


@pytest.mark.parametrize("target", [POSIX, WINDOWS])
def test_failure_modes_are_explicit(target):
    steps = {step.name: step for step in get_variant(target, _config(target)).steps}
    assert steps["build-toolchain"].failure_mode is FailureMode.FATAL
    assert steps["optional-tools"].failure_mode is FailureMode.RECOVERABLE
    assert steps["tessdata-spa"].failure_mode is FailureMode.RECOVERABLE
    assert steps["openalpr"].failure_mode is FailureMode.FATAL


def test_posix_variant():
    variant = get_variant(POSIX, _config(POSIX))
    steps = {step.name: step for step in variant.steps}

    assert isinstance(variant.installer_factory(FakeRunner()), AptInstaller)
    assert variant.linker_cache_command == ("ldconfig",)
    assert variant.cmake_config is None
    assert steps["leptonica"].artifact.build_system is BuildSystem.AUTOTOOLS
    assert steps["leptonica"].artifact.origin.refresh is True
    assert steps["jasper"].artifact.build_system is BuildSystem.CMAKE
    assert steps["opencv-contrib"].artifact.build_system is None
    assert [probe.name for probe in variant.probes] == ["cmake", "tesseract", "opencv", "openalpr"]


def test_posix_openalpr_candidates():
    steps = {step.name: step for step in get_variant(POSIX, _config(POSIX)).steps}
    artifact = steps["openalpr"].artifact

    assert artifact.source_root == Path("/home/user/src/openalpr/src")
    assert len(artifact.build_options) == 2
    assert artifact.build_options[0]["Tesseract_LIBRARIES"] == "/usr/local/lib/libtesseract.so"
    assert "Tesseract_LIBRARIES" not in artifact.build_options[1]


def test_tessdata_step_per_language():
    variant = get_variant(POSIX, _config(POSIX, langs=("spa", "eng")))
    steps = {step.name: step for step in variant.steps}

    eng = steps["tessdata-eng"]
    assert eng.kind is StepKind.SOURCE_BUILD
    assert eng.artifact.local_path == Path("/home/user/src/tessdata/eng.traineddata")
    assert eng.artifact.install_path == Path("/usr/local/share/tessdata/eng.traineddata")
    assert eng.artifact.build_system is None
    assert eng.is_satisfied(InMemorySystemState()) is False
    assert eng.artifact.origin.url.endswith("/eng.traineddata")


def test_windows_variant():
    variant = get_variant(WINDOWS, _config(WINDOWS))
    steps = {step.name: step for step in variant.steps}

    assert isinstance(variant.installer_factory(FakeRunner()), ChocoInstaller)
    assert variant.linker_cache_command is None
    assert variant.cmake_config == "Release"
    source_builds = [step for step in variant.steps if step.artifact and step.artifact.build_system]
    assert all(step.artifact.build_system is BuildSystem.CMAKE for step in source_builds)
    assert steps["jasper"].artifact.build_options[0]["CMAKE_INSTALL_PREFIX"] == "C:/local"


def test_fully_installed_posix_host_is_satisfied():
    config = _config(POSIX)
    variant = get_variant(POSIX, config)
    state = InMemorySystemState()
    for step in variant.steps:
        for package in step.packages:
            state.add_package(package)
    for path in (
        "/usr/local/include/jasper/jasper.h",
        "/usr/local/include/leptonica/allheaders.h",
        "/usr/local/bin/tesseract",
        "/usr/local/include/tesseract/baseapi.h",
        "/usr/local/share/tessdata/spa.traineddata",
        "/home/user/src/opencv_contrib/modules",
        "/usr/local/include/opencv4/opencv2/core.hpp",
    ):
        state.add_path(Path(path))
    state.add_command("alpr")

    assert all(step.is_satisfied(state) for step in variant.steps)


def test_unknown_target():
    with pytest.raises(ValueError):
        get_variant("beos", _config(POSIX))
