"""Tests for the rkffmpeg CLI.

The verify command must work with no arguments, picking the install
directory up from FFMPEG_PREFIX or falling back to ./install, and must
exit non-zero only when a critical check fails.
"""

from __future__ import annotations

import json
import tarfile
from pathlib import Path

import pytest
from click.testing import CliRunner

from ffmpeg_rockchip_tools.cli import main

from .conftest import EM_X86_64


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_verify_reads_install_dir_from_env(
    runner: CliRunner, make_install, fake_readelf, monkeypatch: pytest.MonkeyPatch
) -> None:
    fake_readelf()
    root = make_install()
    monkeypatch.setenv("FFMPEG_PREFIX", str(root))

    result = runner.invoke(main, ["verify", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["passed"] is True
    assert data["install_dir"] == str(root.resolve())


def test_verify_defaults_to_local_install_dir(
    runner: CliRunner, make_install, fake_readelf, monkeypatch: pytest.MonkeyPatch
) -> None:
    fake_readelf()
    root = make_install()
    monkeypatch.delenv("FFMPEG_PREFIX", raising=False)
    monkeypatch.chdir(root.parent)

    result = runner.invoke(main, ["verify", "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["install_dir"] == str(root.resolve())


def test_verify_missing_install_dir(
    runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("FFMPEG_PREFIX", str(tmp_path / "missing"))

    result = runner.invoke(main, ["verify"])

    assert result.exit_code == 1
    assert "make install" in result.output
    assert "VERIFICATION FAILED" in result.output


def test_verify_prefix_is_regular_file(
    runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    install = tmp_path / "install"
    install.write_text("not a directory\n")
    monkeypatch.setenv("FFMPEG_PREFIX", str(install))

    result = runner.invoke(main, ["verify"])

    assert result.exit_code == 1
    assert "make install" in result.output


def test_verify_verbose_shows_warning_hints(
    runner: CliRunner, make_install, fake_readelf
) -> None:
    fake_readelf(needed=("librockchip_mpp.so.1", "librga.so.2"))
    root = make_install()

    quiet = runner.invoke(main, ["verify", "--prefix", str(root)])
    verbose = runner.invoke(main, ["verify", "--prefix", str(root), "-v"])

    assert quiet.exit_code == 0, quiet.output
    assert verbose.exit_code == 0, verbose.output
    assert "--enable-libdrm" not in quiet.output
    assert "--enable-libdrm" in verbose.output


def test_verify_wrong_architecture_json(
    runner: CliRunner, make_install, fake_readelf
) -> None:
    fake_readelf()
    root = make_install(machine=EM_X86_64)

    result = runner.invoke(main, ["verify", "--prefix", str(root), "--json"])

    assert result.exit_code == 1
    data = json.loads(result.output)
    assert data["aborted_step"] == "Architecture"
    assert data["checks"][-1]["kind"] == "wrong_architecture"
    assert all(c["name"] != "Dependencies" for c in data["checks"])


def test_verify_rich_report_shows_next_steps(
    runner: CliRunner, make_install, fake_readelf
) -> None:
    fake_readelf()

    result = runner.invoke(main, ["verify", "--prefix", str(make_install())])

    assert result.exit_code == 0, result.output
    assert "VERIFICATION PASSED" in result.output
    assert "Next steps" in result.output
    assert "grep rkmpp" in result.output


def test_verify_warnings_keep_exit_zero(runner: CliRunner, make_install, tool_path) -> None:
    root = make_install(pkgconfig=False)

    result = runner.invoke(main, ["verify", "--prefix", str(root), "--json"])

    assert result.exit_code == 0, result.output
    statuses = {c["name"]: c["status"] for c in json.loads(result.output)["checks"]}
    assert statuses["Dependencies"] == "warn"
    assert statuses["pkg-config files"] == "warn"


def test_package_creates_tarball(
    runner: CliRunner, make_install, fake_readelf, tmp_path: Path
) -> None:
    fake_readelf()
    root = make_install()
    out = tmp_path / "dist"

    result = runner.invoke(main, ["package", "--prefix", str(root), "--output", str(out)])

    assert result.exit_code == 0, result.output
    [tarball] = out.glob("ffmpeg-rv1126b-*.tar.gz")
    with tarfile.open(tarball) as tar:
        names = tar.getnames()
    assert "bin/ffmpeg" in names
    assert not any(n.startswith("lib") for n in names)


def test_package_refuses_failing_build(
    runner: CliRunner, make_install, fake_readelf, tmp_path: Path
) -> None:
    fake_readelf(needed=("libc.so.6",))
    root = make_install()
    out = tmp_path / "dist"

    result = runner.invoke(main, ["package", "--prefix", str(root), "--output", str(out)])

    assert result.exit_code == 1
    assert "verification failed" in result.output
    assert not out.exists()


def test_package_skip_verify(runner: CliRunner, make_install, tmp_path: Path) -> None:
    root = make_install(machine=EM_X86_64)

    result = runner.invoke(
        main,
        ["package", "--prefix", str(root), "--output", str(tmp_path), "--skip-verify"],
    )

    assert result.exit_code == 0, result.output
    assert list(tmp_path.glob("ffmpeg-rv1126b-*.tar.gz"))


def test_deploy_runs_pyinfra(
    runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    tarball = tmp_path / "ffmpeg-rv1126b-20250101.tar.gz"
    tarball.write_bytes(b"")
    calls = []
    monkeypatch.setattr(
        "ffmpeg_rockchip_tools.cli.subprocess.run",
        lambda cmd, check: calls.append(cmd),
    )

    result = runner.invoke(
        main, ["deploy", "root@10.0.0.5", "--tarball", str(tarball)]
    )

    assert result.exit_code == 0, result.output
    [cmd] = calls
    assert cmd[:2] == ["pyinfra", "root@10.0.0.5"]
    assert cmd[2].endswith("install.py")
    assert f"tarball={tarball.resolve()}" in cmd
    assert "prefix=/usr/local" in cmd
