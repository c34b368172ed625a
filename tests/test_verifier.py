"""Unit tests for the verification stage."""

from unittest.mock import MagicMock

from provisioner.system import CommandResult
from provisioner.verification import NOT_FOUND, Probe, Verifier

from provision_test_helpers import FakeRunner


class TestVerifier:
    def test_reports_versions(self):
        runner = FakeRunner(outputs={
            ("tesseract",): "tesseract 5.3.4\n leptonica-1.84.1\n",
            ("alpr",): "alpr  version: 2.3.0\n",
        })
        verifier = Verifier(runner, [
            Probe("tesseract", ("tesseract", "--version")),
            Probe("openalpr", ("alpr", "--version")),
        ])

        assert verifier.verify() == {"tesseract": "5.3.4", "openalpr": "2.3.0"}

    def test_missing_tool_is_not_found(self):
        runner = FakeRunner(fail={("alpr",): (127, "alpr: command not found")})
        verifier = Verifier(runner, [Probe("openalpr", ("alpr", "--version"))])
        assert verifier.verify() == {"openalpr": NOT_FOUND}

    def test_unparseable_output_is_not_found(self):
        runner = FakeRunner(outputs={("pkg-config",): "garbage"})
        verifier = Verifier(runner, [Probe("opencv", ("pkg-config", "--modversion", "opencv4"))])
        assert verifier.verify() == {"opencv": "not found"}

    def test_custom_pattern(self):
        runner = FakeRunner(outputs={("cmake",): "cmake version 3.28.1\n"})
        probe = Probe("cmake", ("cmake", "--version"), pattern=r"cmake version (\S+)")
        assert Verifier(runner, [probe]).probe(probe) == "3.28.1"

    def test_runner_exception_never_escapes(self):
        runner = MagicMock()
        runner.run.side_effect = PermissionError("denied")
        verifier = Verifier(runner, [Probe("cmake", ("cmake", "--version"))])
        assert verifier.verify() == {"cmake": NOT_FOUND}

    def test_probes_run_unprivileged(self):
        runner = FakeRunner(outputs={("cmake",): "cmake version 3.28.1"})
        Verifier(runner, [Probe("cmake", ("cmake", "--version"))]).verify()
        assert runner.calls[0]["privileged"] is False

    def test_command_result_flags(self):
        assert CommandResult(args=("x",), returncode=127).not_found is True
        assert CommandResult(args=("x",), returncode=0).ok is True
