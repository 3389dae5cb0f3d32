"""Tests for configuration, profiles and the staging directory."""

import signal
from pathlib import Path

import pytest

from diagcollect.collectors.profile import (
    BUILTIN_PROFILE,
    ProfileNotFoundError,
    ProfileValidationError,
    load_profile,
)
from diagcollect.core.config import load_config
from diagcollect.core.errors import ConfigValidationError, StagingDirectoryError
from diagcollect.evidence.staging import StagingDirectory, exit_on_signals
from diagcollect.evidence.upload import build_upload_command


def test_builtin_profile_loads():
    profile = load_profile()
    assert BUILTIN_PROFILE.is_file()
    assert profile.commands
    assert "system-logs" in profile.files
    assert all(p.startswith("/") for c in profile.files.values() for p in c.paths)


def test_profile_from_file(tmp_path):
    path = tmp_path / "p.yaml"
    path.write_text(
        "name: small\n"
        "commands:\n"
        "  - {command: 'uname -a', destination: uname.txt}\n"
        "files:\n"
        "  logs: {paths: ['/var/log/*.log'], max_size_mb: 5}\n"
    )
    profile = load_profile(path)
    assert profile.commands[0].command == "uname -a"
    assert profile.budget_for("logs", 150) == 5 * 1024 * 1024
    assert profile.without_budget_overrides().budget_for("logs", 150) == 150 * 1024 * 1024
    assert profile.files["logs"].max_size_mb == 5


def test_missing_profile(tmp_path):
    with pytest.raises(ProfileNotFoundError):
        load_profile(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "document",
    [
        "- just a list\n",
        "name: x\ncommands:\n  - {command: ls, destination: /etc/passwd}\n",
        "name: x\ncommands:\n  - {command: ls, destination: ../out.txt}\n",
        "name: x\nfiles:\n  logs: {paths: ['relative/*.log']}\n",
        "name: x\nunknown_key: 1\n",
        "name: [unclosed\n",
    ],
)
def test_invalid_profiles(tmp_path, document):
    path = tmp_path / "bad.yaml"
    path.write_text(document)
    with pytest.raises(ProfileValidationError) as exc_info:
        load_profile(path)
    assert exc_info.value.error.context["errors"]


def test_config_file_with_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("max_size_mb: 10\nreveal_filtered: true\nstaging_name: fixed\n")

    config = load_config(path, {"max_size_mb": 20, "keep_raw": None})

    assert config.max_size_mb == 20
    assert config.reveal_filtered is True
    assert config.keep_raw is False
    assert config.staging_path == (Path(".") / "fixed").absolute()
    assert config.max_size_bytes == 20 * 1024 * 1024


def test_config_defaults():
    config = load_config()
    assert config.archive is True
    assert config.system_root == Path("/")
    assert config.staging_name.startswith("diagcollect-")


@pytest.mark.parametrize(
    "document",
    ["max_size_mb: lots\n", "staging_name: a/b\n", "no_such_setting: 1\n", "[1, 2]\n"],
)
def test_invalid_config(tmp_path, document):
    path = tmp_path / "config.yaml"
    path.write_text(document)
    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_staging_directory_kept_by_default(tmp_path):
    with StagingDirectory(tmp_path / "s") as staging:
        (staging.path / "f").write_text("x")
    assert (tmp_path / "s" / "f").exists()


def test_staging_directory_removed_on_error(tmp_path):
    with pytest.raises(ValueError):
        with StagingDirectory(tmp_path / "s", remove_on_exit=True):
            raise ValueError("boom")
    assert not (tmp_path / "s").exists()


def test_staging_directory_uncreatable(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(StagingDirectoryError) as exc_info:
        StagingDirectory(blocker / "s").create()
    assert exc_info.value.exit_code == 5


def test_sigterm_becomes_system_exit():
    previous = signal.getsignal(signal.SIGTERM)
    with pytest.raises(SystemExit) as exc_info:
        with exit_on_signals():
            signal.raise_signal(signal.SIGTERM)
    assert exc_info.value.code == 128 + signal.SIGTERM
    assert signal.getsignal(signal.SIGTERM) == previous


def test_upload_command_quotes_archive():
    assert build_upload_command("curl -T {archive} https://x", Path("/tmp/a b.tar.gz")) == (
        "curl -T '/tmp/a b.tar.gz' https://x"
    )
    assert build_upload_command("scp", Path("/tmp/a.tar.gz")) == "scp /tmp/a.tar.gz"
