"""Unit tests for BuildExecutor and flag rendering."""

from pathlib import Path

import pytest

from provisioner.builder import (
    BuildError,
    BuildExecutor,
    BuildState,
    autotools_flags,
    cmake_flags,
)
from provisioner.steps import ArchiveOrigin, BuildSystem, RepositoryOrigin, SourceArtifact

from provision_test_helpers import FakeRunner


def _artifact(tmp_path, build_system=BuildSystem.CMAKE, options=({},), **kwargs):
    local_path = tmp_path / "project"
    local_path.mkdir(exist_ok=True)
    return SourceArtifact(
        origin=RepositoryOrigin("https://example.com/project.git"),
        local_path=local_path,
        build_system=build_system,
        build_options=options,
        **kwargs,
    )


class TestFlags:
    def test_autotools_flags(self):
        flags = autotools_flags({
            "prefix": "/usr/local",
            "disable-shared": True,
            "with-x": False,
            "with-jasper": None,
        })
        assert flags == ["--prefix=/usr/local", "--disable-shared", "--with-jasper"]

    def test_cmake_flags(self):
        flags = cmake_flags({
            "CMAKE_BUILD_TYPE": "Release",
            "JAS_ENABLE_DOC": False,
            "BUILD_SHARED_LIBS": True,
            "UNSET": None,
            "JOBS": 4,
        })
        assert flags == [
            "-DCMAKE_BUILD_TYPE=Release",
            "-DJAS_ENABLE_DOC=OFF",
            "-DBUILD_SHARED_LIBS=ON",
            "-DJOBS=4",
        ]


class TestCMakeBuild:
    def test_out_of_source_transitions(self, tmp_path):
        runner = FakeRunner()
        artifact = _artifact(tmp_path, options=({"CMAKE_INSTALL_PREFIX": "/usr/local"},))
        result = BuildExecutor(runner, jobs=4).build(artifact)

        root = str(artifact.local_path)
        build_dir = str(artifact.local_path / "build")
        assert runner.commands == [
            ("cmake", "-S", root, "-B", build_dir, "-DCMAKE_INSTALL_PREFIX=/usr/local"),
            ("cmake", "--build", build_dir, "--parallel", "4"),
            ("cmake", "--install", build_dir),
            ("ldconfig",),
        ]
        assert [call["privileged"] for call in runner.calls] == [False, False, True, True]
        assert result.state is BuildState.INSTALLED
        assert result.candidate_index == 0
        assert result.linker_cache_refreshed is True
        assert (artifact.local_path / "build").is_dir()

    def test_source_subdir_and_build_config(self, tmp_path):
        runner = FakeRunner()
        artifact = _artifact(tmp_path, source_subdir="src")
        BuildExecutor(runner, jobs=2, linker_cache_command=None, cmake_config="Release").build(artifact)

        build_dir = str(artifact.local_path / "src" / "build")
        assert runner.commands[0][:5] == (
            "cmake", "-S", str(artifact.local_path / "src"), "-B", build_dir,
        )
        assert runner.commands[1] == ("cmake", "--build", build_dir, "--parallel", "2", "--config", "Release")
        assert runner.commands[2] == ("cmake", "--install", build_dir, "--config", "Release")
        assert len(runner.commands) == 3

    def test_second_candidate_after_first_fails(self, tmp_path):
        artifact = _artifact(tmp_path, options=({"Tesseract_LIBRARIES": "/bad"}, {}))
        build_dir = artifact.local_path / "build"
        build_dir.mkdir()
        (build_dir / "CMakeCache.txt").write_text("stale")

        first = ("cmake", "-S", str(artifact.local_path), "-B", str(build_dir), "-DTesseract_LIBRARIES=/bad")
        runner = FakeRunner(fail={first: (1, "Could NOT find Tesseract")})
        result = BuildExecutor(runner).build(artifact)

        assert result.candidate_index == 1
        assert not (build_dir / "CMakeCache.txt").exists()
        assert runner.commands[1] == ("cmake", "-S", str(artifact.local_path), "-B", str(build_dir))

    def test_all_candidates_fail(self, tmp_path):
        runner = FakeRunner(fail={("cmake", "-S"): (1, "CMake Error: bad generator")})
        artifact = _artifact(tmp_path, options=({"A": "1"}, {"A": "2"}))

        with pytest.raises(BuildError) as exc_info:
            BuildExecutor(runner).build(artifact)

        assert exc_info.value.transition is BuildState.CONFIGURED
        assert "CMake Error" in exc_info.value.output
        assert "2 configuration candidate(s)" in str(exc_info.value)
        assert len(runner.commands) == 2

    def test_build_failure_short_circuits_install(self, tmp_path):
        runner = FakeRunner(fail={("cmake", "--build"): (2, "error: undefined reference")})

        with pytest.raises(BuildError) as exc_info:
            BuildExecutor(runner).build(_artifact(tmp_path))

        assert exc_info.value.transition is BuildState.BUILT
        assert exc_info.value.output_tail == "error: undefined reference"
        assert not any(cmd[:2] == ("cmake", "--install") for cmd in runner.commands)
        assert ("ldconfig",) not in runner.commands


class TestAutotoolsBuild:
    def test_runs_autogen_when_present(self, tmp_path):
        runner = FakeRunner()
        artifact = _artifact(
            tmp_path, build_system=BuildSystem.AUTOTOOLS, options=({"prefix": "/usr/local"},)
        )
        (artifact.local_path / "autogen.sh").write_text("#!/bin/sh\n")

        BuildExecutor(runner, jobs=8).build(artifact)

        assert runner.commands == [
            ("./autogen.sh",),
            ("./configure", "--prefix=/usr/local"),
            ("make", "-j8"),
            ("make", "install"),
            ("ldconfig",),
        ]
        assert all(call["cwd"] == artifact.local_path for call in runner.calls[:4])
        assert runner.calls[3]["privileged"] is True

    def test_without_autogen(self, tmp_path):
        runner = FakeRunner()
        artifact = _artifact(tmp_path, build_system=BuildSystem.AUTOTOOLS, refresh_linker_cache=False)
        BuildExecutor(runner).build(artifact)
        assert runner.commands == [("./configure",), ("make", "-j1"), ("make", "install")]

    def test_install_failure(self, tmp_path):
        runner = FakeRunner(fail={("make", "install"): (2, "Permission denied")})
        artifact = _artifact(tmp_path, build_system=BuildSystem.AUTOTOOLS)

        with pytest.raises(BuildError) as exc_info:
            BuildExecutor(runner).build(artifact)

        assert exc_info.value.transition is BuildState.INSTALLED
        assert str(exc_info.value) == "install failed: make install"


class TestLinkerCache:
    def test_failure_is_install_error(self, tmp_path):
        runner = FakeRunner(fail={("ldconfig",): (1, "ldconfig: permission denied")})
        with pytest.raises(BuildError) as exc_info:
            BuildExecutor(runner).build(_artifact(tmp_path))
        assert exc_info.value.transition is BuildState.INSTALLED

    def test_refresh_runs_last(self, tmp_path):
        runner = FakeRunner()
        BuildExecutor(runner, linker_cache_command=("ldconfig", "-v")).build(_artifact(tmp_path))
        assert runner.commands[-1] == ("ldconfig", "-v")


def test_artifact_without_build_system_rejected(tmp_path):
    with pytest.raises(ValueError):
        BuildExecutor(FakeRunner()).build(_artifact(tmp_path, build_system=None))


class TestInstallFile:
    def test_privileged_copy_to_install_path(self, tmp_path):
        runner = FakeRunner()
        staged = tmp_path / "tessdata" / "spa.traineddata"
        artifact = SourceArtifact(
            origin=ArchiveOrigin("https://example.com/spa.traineddata"),
            local_path=staged,
            install_path=Path("/usr/local/share/tessdata/spa.traineddata"),
        )

        BuildExecutor(runner).install_file(artifact)

        assert runner.commands == [
            ("install", "-D", "-m", "0644", str(staged), "/usr/local/share/tessdata/spa.traineddata"),
        ]
        assert runner.calls[0]["privileged"] is True

    def test_copy_failure(self, tmp_path):
        runner = FakeRunner(fail={("install",): (1, "install: cannot stat")})
        artifact = SourceArtifact(
            origin=ArchiveOrigin("https://example.com/spa.traineddata"),
            local_path=tmp_path / "spa.traineddata",
            install_path=tmp_path / "out" / "spa.traineddata",
        )
        with pytest.raises(BuildError) as exc_info:
            BuildExecutor(runner).install_file(artifact)
        assert exc_info.value.transition is BuildState.INSTALLED

    def test_requires_install_path(self, tmp_path):
        with pytest.raises(ValueError):
            BuildExecutor(FakeRunner()).install_file(_artifact(tmp_path, build_system=None))
