"""
Tests for package-manager detection.
"""

from pathlib import Path

from cache_relocator.adapters.mock import FakeCommandRunner
from cache_relocator.core.models.descriptor import Catalog
from cache_relocator.core.services.detection import Detector


class TestDetector:
    def test_command_on_path(self, make_descriptor):
        runner = FakeCommandRunner({"npm": "/usr/bin/npm"})
        report = Detector(which=runner.which).detect(make_descriptor("npm"))
        assert report.installed
        assert report.command == "npm"
        assert report.command_path == "/usr/bin/npm"
        assert "npm" in report.evidence

    def test_any_command_is_enough(self, make_descriptor):
        runner = FakeCommandRunner({"pip3": "/usr/bin/pip3"})
        d = make_descriptor("pip", detection_commands=("pip", "pip3"))
        assert Detector(which=runner.which).detect(d).command == "pip3"

    def test_path_pattern(self, make_descriptor, tmp_path: Path):
        (tmp_path / "tools" / "dotnet-8.0").mkdir(parents=True)
        d = make_descriptor("nuget", detection_commands=(), detection_paths=(str(tmp_path / "tools" / "dotnet-*"),))
        report = Detector(which=lambda _c: None).detect(d)
        assert report.installed
        assert report.matched_path == str(tmp_path / "tools" / "dotnet-8.0")

    def test_path_pattern_expands_vars(self, make_descriptor, tmp_path: Path):
        (tmp_path / "cargo" / "bin").mkdir(parents=True)
        d = make_descriptor("cargo", detection_commands=(), detection_paths=("$TOOLS/cargo/bin",))
        detector = Detector(which=lambda _c: None, environ={"TOOLS": str(tmp_path)})
        assert detector.is_installed(d)

    def test_not_installed(self, make_descriptor, tmp_path: Path):
        d = make_descriptor("go", detection_paths=(str(tmp_path / "missing"),))
        report = Detector(which=lambda _c: None).detect(d)
        assert not report.installed
        assert report.evidence == ""

    def test_no_criteria_never_installed(self, make_descriptor):
        d = make_descriptor("bare", detection_commands=())
        assert not Detector(which=lambda _c: "/bin/anything").is_installed(d)

    def test_resolver_errors_mean_absent(self, make_descriptor):
        def broken(_command):
            raise OSError("boom")

        assert not Detector(which=broken).is_installed(make_descriptor("npm"))

    def test_adding_criteria_is_monotonic(self, make_descriptor, tmp_path: Path):
        tmp_path.joinpath("yarn.cmd").write_text("")
        detector = Detector(which=FakeCommandRunner({"yarn": "/usr/bin/yarn"}).which)
        base = make_descriptor("yarn")
        wider = make_descriptor(
            "yarn",
            detection_commands=("yarn", "yarnpkg"),
            detection_paths=(str(tmp_path / "yarn.cmd"), str(tmp_path / "nope")),
        )
        assert detector.is_installed(base)
        assert detector.is_installed(wider)

        narrow = make_descriptor("yarn", detection_commands=("nope",))
        assert not detector.is_installed(narrow)
        assert detector.is_installed(
            make_descriptor("yarn", detection_commands=("nope",), detection_paths=(str(tmp_path / "yarn.cmd"),)),
        )

    def test_detect_all_keeps_order(self, make_descriptor):
        catalog = Catalog([make_descriptor("npm"), make_descriptor("pip"), make_descriptor("go")])
        runner = FakeCommandRunner({"go": "/usr/bin/go"})
        results = Detector(which=runner.which).detect_all(catalog)
        assert [d.name for d, _ in results] == ["npm", "pip", "go"]
        assert [r.installed for _, r in results] == [False, False, True]

    def test_to_dict(self, make_descriptor):
        report = Detector(which=lambda _c: None).detect(make_descriptor("npm"))
        assert report.to_dict() == {
            "name": "npm",
            "installed": False,
            "command": None,
            "command_path": None,
            "matched_path": None,
        }
