import json
import subprocess
from importlib.resources import files
from pathlib import Path

import click

from ffmpeg_rockchip_tools.verify import (
    VerifyReport,
    deployment_guidance,
    load_config,
    run_verification,
)


def _report_data(report: VerifyReport) -> dict:
    return {
        "passed": report.passed,
        "aborted_step": report.aborted_step,
        "checks": [
            {
                "name": c.name,
                "status": c.status.value,
                "message": c.message,
                "remediation": c.remediation,
                "kind": c.kind.value if c.kind else None,
                "details": list(c.details),
            }
            for c in report.results
        ],
    }


def _echo_failures(report: VerifyReport) -> None:
    for failure in report.failures():
        click.echo(f"✗ {failure.name}: {failure.message}", err=True)
        if failure.remediation:
            click.echo(f"  {failure.remediation}", err=True)


@click.group()
def main():
    """Cross-compile and verify FFmpeg-Rockchip builds."""
    pass


@main.command()
@click.option(
    "--prefix",
    "install_dir",
    type=click.Path(path_type=Path),
    envvar="FFMPEG_PREFIX",
    default=None,
    help="Install directory to verify [env: FFMPEG_PREFIX; default: ./install]",
)
@click.option(
    "--verbose", "-v", is_flag=True, help="Show remediation hints for warnings too"
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def verify(install_dir: Path | None, verbose: bool, as_json: bool):
    """Verify a cross-compiled build without target hardware."""
    from ffmpeg_rockchip_tools.ui import render_report

    config = load_config(install_dir)
    report = run_verification(config)

    if as_json:
        data = {"install_dir": str(config.install_dir), **_report_data(report)}
        click.echo(json.dumps(data, indent=2))
    else:
        render_report(
            "FFmpeg-Rockchip Build Verification",
            str(config.install_dir),
            report,
            verbose=verbose,
            next_steps=deployment_guidance(config),
        )

    raise SystemExit(report.exit_code)


@main.command()
@click.option(
    "--sdk-root",
    type=click.Path(path_type=Path),
    envvar="SDK_ROOT",
    default=None,
    help="Vendor SDK root [env: SDK_ROOT; default: ../RV1126B-P-SDK/...]",
)
@click.option(
    "--prefix",
    "install_prefix",
    type=click.Path(path_type=Path),
    envvar="FFMPEG_PREFIX",
    default=None,
    help="Where FFmpeg will be installed [env: FFMPEG_PREFIX; default: ./install]",
)
@click.option("--shell", "as_shell", is_flag=True, help="Print export lines for eval")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def env(
    sdk_root: Path | None,
    install_prefix: Path | None,
    as_shell: bool,
    as_json: bool,
):
    """Check the SDK and print the cross-compile environment.

    Load it into the current shell with: eval "$(rkffmpeg env --shell)"
    """
    import shlex

    from ffmpeg_rockchip_tools.sdk import build_cross_env, run_env_checks
    from ffmpeg_rockchip_tools.ui import render_report

    cross_env = build_cross_env(sdk_root=sdk_root, install_prefix=install_prefix)
    report = run_env_checks(cross_env)

    if as_shell:
        if not report.passed:
            _echo_failures(report)
            raise SystemExit(1)
        for key, value in cross_env.variables().items():
            if key == "PATH":
                toolchain_bin = shlex.quote(str(cross_env.sdk.toolchain_bin))
                click.echo(f'export PATH={toolchain_bin}:"$PATH"')
            else:
                click.echo(f"export {key}={shlex.quote(value)}")
        return

    if as_json:
        data = {"variables": cross_env.variables(), **_report_data(report)}
        click.echo(json.dumps(data, indent=2))
    else:
        configure = " \\\n    ".join(cross_env.configure_args())
        render_report(
            "FFmpeg-Rockchip Cross-Compilation Environment",
            str(cross_env.sdk.root),
            report,
            next_steps=[
                'eval "$(rkffmpeg env --shell)"',
                configure,
                "make -j$(nproc)",
                "make install",
                "rkffmpeg verify",
            ],
        )

    raise SystemExit(report.exit_code)


@main.command()
@click.option(
    "--prefix",
    "install_dir",
    type=click.Path(path_type=Path),
    envvar="FFMPEG_PREFIX",
    default=None,
    help="Install directory to package [env: FFMPEG_PREFIX; default: ./install]",
)
@click.option(
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the tarball (default: the install directory)",
)
@click.option("--with-libs", is_flag=True, help="Include lib/ for shared builds")
@click.option("--skip-verify", is_flag=True, help="Package without verifying first")
def package(
    install_dir: Path | None,
    output_dir: Path | None,
    with_libs: bool,
    skip_verify: bool,
):
    """Create a deployment tarball from a verified build."""
    from ffmpeg_rockchip_tools.package import create_package

    config = load_config(install_dir)
    if not skip_verify:
        report = run_verification(config)
        if not report.passed:
            _echo_failures(report)
            raise click.ClickException(
                "Build verification failed, not packaging (use --skip-verify to override)"
            )

    try:
        tarball = create_package(
            config.install_dir,
            output_dir=output_dir,
            prefix=config.package_prefix,
            include_libs=with_libs,
        )
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created {tarball}")


@main.command()
@click.argument("host")
@click.option(
    "--tarball",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Tarball created by 'rkffmpeg package'",
)
@click.option(
    "--prefix", "device_prefix", default="/usr/local", help="Install prefix on device"
)
def deploy(host: str, tarball: Path, device_prefix: str):
    """Install a packaged build on a device over SSH."""
    deploys = files("ffmpeg_rockchip_tools.deploys")
    path = deploys.joinpath("install.py")
    subprocess.run(
        [
            "pyinfra",
            host,
            str(path),
            "--data",
            f"tarball={tarball.resolve()}",
            "--data",
            f"prefix={device_prefix}",
        ],
        check=True,
    )


if __name__ == "__main__":
    main()
