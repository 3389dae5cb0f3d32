"""End-to-end tests for a collection run."""

import json
import tarfile

import pytest

from diagcollect.collectors.orchestrator import REPORT_NAME, Collector
from diagcollect.core.errors import StagingDirectoryError
from diagcollect.models.collection import TargetStatus
from diagcollect.models.config import CollectionConfig
from diagcollect.models.profile import Profile


@pytest.fixture
def profile() -> Profile:
    return Profile.model_validate({
        "name": "test",
        "commands": [
            {"command": "echo password=abc", "destination": "commands/echo.txt"},
            {"command": "exit 2", "destination": "commands/fail.txt"},
        ],
        "files": {
            "config": {"paths": ["/etc/app.conf", "/etc/blob.bin"]},
            "logs": {"paths": ["/var/log/app*.log*"], "max_size_mb": 0},
        },
    })


@pytest.fixture
def host(make_file):
    make_file("/etc/app.conf", b"secret: xyz\n", mtime=1000)
    make_file("/etc/blob.bin", b"\x89PNG\r\n\x1a\n" + b"\x00" * 32, mtime=1000)
    make_file("/var/log/app.log", b"token=t1\n", mtime=3000)
    make_file("/var/log/app.log.1.gz", b"token=t0\n", mtime=2000, compress=True)


def _config(tmp_path, system_root, **kwargs) -> CollectionConfig:
    return CollectionConfig(
        output_dir=tmp_path / "out",
        staging_name="run",
        system_root=system_root,
        **kwargs,
    )


def test_collect_without_archive_keeps_staging(tmp_path, system_root, host, profile):
    config = _config(tmp_path, system_root, archive=False)

    report = Collector(config, profile).run()

    staging = tmp_path / "out" / "run"
    assert staging.is_dir()
    assert (staging / "commands" / "echo.txt").read_text() == (
        "echo password=+FILTERED+\npassword=+FILTERED+\n"
    )
    assert (staging / "etc" / "app.conf").read_text() == "secret: +FILTERED+\n"
    assert (staging / "var" / "log" / "app.log.1").read_text() == "token=+FILTERED+\n"
    assert (staging / "skipped_files").read_text() == "/etc/blob.bin: unknown type image/png\n"

    totals = report.totals()
    assert totals["written"] == 4
    assert totals["failed"] == 1
    assert totals["skipped"] == 1
    assert report.archive_path is None

    saved = json.loads((staging / REPORT_NAME).read_text())
    assert len(saved["results"]) == 6


def test_failed_command_does_not_abort_run(tmp_path, system_root, host, profile):
    report = Collector(_config(tmp_path, system_root, archive=False), profile).run()
    failed = [r for r in report.results if r.status == TargetStatus.FAILED]
    assert [r.source for r in failed] == ["exit 2"]
    assert (tmp_path / "out" / "run" / "commands" / "fail.txt").read_text() == "exit 2\n"


def test_archive_removes_staging_unless_kept(tmp_path, system_root, host, profile):
    report = Collector(_config(tmp_path, system_root), profile).run()

    archive = tmp_path / "out" / "run.tar.gz"
    assert report.archive_path == str(archive)
    assert not (tmp_path / "out" / "run").exists()
    assert (tmp_path / "out" / "run.tar.gz.sha256").read_text().startswith(report.archive_sha256)
    with tarfile.open(archive) as tar:
        names = tar.getnames()
    assert "run/etc/app.conf" in names
    assert f"run/{REPORT_NAME}" in names


def test_keep_raw_keeps_staging_next_to_archive(tmp_path, system_root, host, profile):
    Collector(_config(tmp_path, system_root, keep_raw=True), profile).run()
    assert (tmp_path / "out" / "run").is_dir()
    assert (tmp_path / "out" / "run.tar.gz").is_file()


def test_staging_is_removed_when_run_fails(tmp_path, system_root, host, profile, monkeypatch):
    def boom(self, staging_path):
        (staging_path / "partial").write_text("x")
        raise RuntimeError("interrupted")

    monkeypatch.setattr(Collector, "collect", boom)

    with pytest.raises(RuntimeError):
        Collector(_config(tmp_path, system_root), profile).run()
    assert not (tmp_path / "out" / "run").exists()


def test_existing_staging_directory_is_fatal(tmp_path, system_root, profile):
    (tmp_path / "out" / "run").mkdir(parents=True)
    with pytest.raises(StagingDirectoryError):
        Collector(_config(tmp_path, system_root, archive=False), profile).run()


def test_category_budget_override(tmp_path, system_root, make_file):
    for i in range(3):
        make_file(f"/var/log/f{i}.log", b"x" * 600 * 1024, mtime=1000 + i)
    profile = Profile.model_validate({
        "name": "budget",
        "files": {"logs": {"paths": ["/var/log/*.log"], "max_size_mb": 1}},
    })
    config = _config(tmp_path, system_root, archive=False, max_size_mb=0)

    report = Collector(config, profile).run()

    statuses = {r.source: r.status for r in report.results}
    assert statuses == {
        "/var/log/f2.log": TargetStatus.WRITTEN,
        "/var/log/f1.log": TargetStatus.WRITTEN,
        "/var/log/f0.log": TargetStatus.SKIPPED,
    }


def test_upload_command_receives_archive(tmp_path, system_root, host, profile):
    marker = tmp_path / "uploaded"
    config = _config(tmp_path, system_root, upload_command=f"cp {{archive}} {marker}")

    report = Collector(config, profile).run()

    assert report.uploaded
    assert marker.is_file()


def test_failed_upload_is_not_fatal(tmp_path, system_root, host, profile):
    config = _config(tmp_path, system_root, upload_command="false")
    report = Collector(config, profile).run()
    assert not report.uploaded
    assert (tmp_path / "out" / "run.tar.gz").is_file()


def test_upload_with_undecodable_output_is_not_fatal(tmp_path, system_root, host, profile, capsys):
    config = _config(tmp_path, system_root, upload_command="printf '\\377\\376 x'; exit 1; true")

    report = Collector(config, profile).run()

    assert not report.uploaded
    assert report.archive_sha256
    assert (tmp_path / "out" / "run.tar.gz").is_file()
    assert "exit status 1" in capsys.readouterr().err
