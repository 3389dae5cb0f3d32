"""Tests for the command-line interface."""

import gzip
import json

from click.testing import CliRunner

from diagcollect.cli.main import cli


def _write_profile(tmp_path):
    path = tmp_path / "profile.yaml"
    path.write_text(
        "name: cli\n"
        "commands:\n"
        "  - {command: 'echo secret=abc', destination: commands/echo.txt}\n"
        "files:\n"
        "  config: {paths: ['/etc/*.conf']}\n"
    )
    return path


def test_collect_writes_staging_tree(tmp_path, make_file, system_root):
    make_file("/etc/db.conf", b"password = hunter2\n")
    profile = _write_profile(tmp_path)
    out = tmp_path / "out"

    result = CliRunner().invoke(cli, [
        "--quiet",
        "collect",
        "--profile", str(profile),
        "--output-dir", str(out),
        "--system-root", str(system_root),
        "--no-archive",
    ])

    assert result.exit_code == 0, result.output
    (staging,) = out.iterdir()
    assert (staging / "etc" / "db.conf").read_text() == "password = +FILTERED+\n"
    report = json.loads((staging / "collection_report.json").read_text())
    assert {r["status"] for r in report["results"]} == {"written"}


def test_collect_reads_config_file(tmp_path, make_file, system_root):
    make_file("/etc/app.conf", b"token: abc\n")
    profile = _write_profile(tmp_path)
    config = tmp_path / "config.yaml"
    config.write_text(
        f"profile: {profile}\n"
        f"output_dir: {tmp_path / 'out'}\n"
        f"system_root: {system_root}\n"
        "staging_name: from-config\n"
        "archive: false\n"
    )

    result = CliRunner().invoke(cli, ["-q", "collect", "--config", str(config)])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "from-config" / "etc" / "app.conf").read_text() == "token: +FILTERED+\n"


def test_collect_reveal_filtered_echoes_lines(tmp_path, make_file, system_root):
    make_file("/etc/app.conf", b"token: abc\n")
    profile = _write_profile(tmp_path)

    result = CliRunner().invoke(cli, [
        "-q",
        "collect",
        "-p", str(profile),
        "-o", str(tmp_path / "out"),
        "--system-root", str(system_root),
        "--no-archive",
        "--reveal-filtered",
    ])

    assert result.exit_code == 0
    assert "/etc/app.conf: token: abc" in result.output


def test_explicit_max_size_replaces_profile_budgets(tmp_path, make_file, system_root):
    for i in range(3):
        make_file(f"/var/log/f{i}.log", b"x" * 600 * 1024, mtime=1000 + i)
    profile = tmp_path / "profile.yaml"
    profile.write_text(
        "name: logs\n"
        "files:\n"
        "  logs: {paths: ['/var/log/*.log'], max_size_mb: 1}\n"
    )
    args = ["-q", "collect", "-p", str(profile), "--system-root", str(system_root), "--no-archive"]

    capped = CliRunner().invoke(cli, [*args, "-o", str(tmp_path / "capped")])
    unlimited = CliRunner().invoke(cli, [*args, "-o", str(tmp_path / "all"), "--max-size-mb", "0"])

    assert capped.exit_code == 0, capped.output
    assert unlimited.exit_code == 0, unlimited.output
    (capped_staging,) = (tmp_path / "capped").iterdir()
    (all_staging,) = (tmp_path / "all").iterdir()
    assert sorted(p.name for p in (capped_staging / "var" / "log").iterdir()) == ["f1.log", "f2.log"]
    assert sorted(p.name for p in (all_staging / "var" / "log").iterdir()) == ["f0.log", "f1.log", "f2.log"]


def test_collect_missing_profile_fails(tmp_path):
    result = CliRunner().invoke(cli, [
        "collect",
        "--profile", str(tmp_path / "missing.yaml"),
        "--output-dir", str(tmp_path),
    ])
    assert result.exit_code == 1
    assert "PROFILE_NOT_FOUND" in result.output


def test_collect_staging_failure_exit_code(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    result = CliRunner().invoke(cli, [
        "collect",
        "--profile", str(_write_profile(tmp_path)),
        "--output-dir", str(blocker / "sub"),
    ])
    assert result.exit_code == 5
    assert "STAGING_DIRECTORY_ERROR" in result.output


def test_redact_stdin():
    result = CliRunner().invoke(cli, ["redact"], input="a=1\nstorepass=changeit\n")
    assert result.exit_code == 0
    assert "storepass=+FILTERED+" in result.output
    assert "changeit" not in result.output


def test_redact_compressed_file(tmp_path):
    path = tmp_path / "app.log.gz"
    path.write_bytes(gzip.compress(b"oauth_consumer_key: k123\n"))
    result = CliRunner().invoke(cli, ["redact", str(path)])
    assert result.exit_code == 0
    assert "oauth_consumer_key: +FILTERED+" in result.output


def test_redact_binary_file_fails(tmp_path):
    path = tmp_path / "bin"
    path.write_bytes(b"\x7fELF" + b"\x00" * 16)
    result = CliRunner().invoke(cli, ["redact", str(path)])
    assert result.exit_code == 1


def test_classify(tmp_path):
    path = tmp_path / "messages.gz"
    path.write_bytes(gzip.compress(b"hello\n"))
    result = CliRunner().invoke(cli, ["classify", str(path)])
    assert result.exit_code == 0
    (entry,) = json.loads(result.output)
    assert entry["kind"] == "gzip"
    assert entry["collected_as"] == "messages"
    assert entry["collectable"] is True


def test_profile_show():
    result = CliRunner().invoke(cli, ["profile", "show"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["name"] == "linux-default"


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "diagcollect" in result.output
