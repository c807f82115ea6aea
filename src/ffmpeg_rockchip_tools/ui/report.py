"""Rich rendering for verification reports."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ffmpeg_rockchip_tools.verify import CheckStatus, VerifyReport

STATUS_ICONS = {
    CheckStatus.PASS: "[green]✓[/green]",
    CheckStatus.WARN: "[yellow]⚠[/yellow]",
    CheckStatus.FAIL: "[red]✗[/red]",
    CheckStatus.INFO: "[blue]•[/blue]",
    CheckStatus.SKIP: "[dim]-[/dim]",
}


def _build_results_table(report: VerifyReport, verbose: bool) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Check", style="cyan", min_width=20)
    table.add_column("Status", justify="center", width=6)
    table.add_column("Details", min_width=30)

    for check in report.results:
        details = escape(check.message)
        if check.details:
            details += "\n" + "\n".join(f"  - {escape(d)}" for d in check.details)
        if check.remediation and (verbose or check.status == CheckStatus.FAIL):
            details += f"\n[dim]{escape(check.remediation)}[/dim]"
        table.add_row(check.name, STATUS_ICONS[check.status], details)

    return table


def _build_summary(report: VerifyReport) -> Panel:
    passed = report.count(CheckStatus.PASS)
    warned = report.count(CheckStatus.WARN)
    failed = report.count(CheckStatus.FAIL)
    skipped = report.count(CheckStatus.SKIP)

    if report.passed:
        summary = "[green bold]✓ VERIFICATION PASSED[/green bold]"
        border_style = "green"
    else:
        summary = f"[red bold]✗ VERIFICATION FAILED[/red bold] at {report.aborted_step}"
        border_style = "red"

    stats = f"Passed: {passed} | Warnings: {warned} | Failed: {failed}"
    if skipped > 0:
        stats += f" | Skipped: {skipped}"

    return Panel(f"{summary}\n{stats}", title="Summary", border_style=border_style)


def render_report(
    title: str,
    location: str,
    report: VerifyReport,
    verbose: bool = False,
    next_steps: list[str] | None = None,
    console: Console | None = None,
) -> None:
    console = console or Console()
    console.print(Panel(f"Directory: {escape(location)}", title=title))
    console.print()
    console.print(_build_results_table(report, verbose))
    console.print()
    console.print(_build_summary(report))

    if report.passed and next_steps:
        console.print()
        console.print(Panel("\n".join(escape(s) for s in next_steps), title="Next steps"))
