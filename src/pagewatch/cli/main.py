"""Main CLI application using Click framework."""

import asyncio
import functools
import sys
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import click
from rich.console import Console
from rich.table import Table

from ..config import ConfigError, ConfigLoader, get_settings
from ..realtime.listener import RealtimeWatcher
from ..scheduler.manager import SchedulerManager
from ..scheduler.orchestrator import cleanup_change_monitor, get_change_monitor
from ..scheduler.types import CheckReport, CheckStatus
from ..storage import cleanup_registry, get_registry
from ..storage.interface import TargetRegistry
from ..storage.types import TrackedTarget
from ..utils.logging import get_structured_logger, setup_logging
from .types import CLIContext, CLIError, CommandResult, OutputFormat

console = Console()
logger = get_structured_logger(__name__)

ALLOWED_SCHEMES = ("http", "https", "file")
WATCHER_SYNC_SECONDS = 60

STATUS_STYLES = {
    CheckStatus.CHANGED: "🔔 Changed",
    CheckStatus.UNCHANGED: "✅ Unchanged",
    CheckStatus.FIRST_OBSERVATION: "🌱 Baseline",
    CheckStatus.FAILED: "❌ Failed",
    CheckStatus.SKIPPED: "⏭️ Skipped",
}


def async_command(f):
    """Decorator to run async functions in Click commands."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(f(*args, **kwargs))
        except KeyboardInterrupt:
            console.print("❌ Operation cancelled by user", style="red")
            sys.exit(1)
        except (CLIError, ConfigError) as e:
            console.print(f"❌ Error: {str(e)}", style="red")
            logger.error("CLI command failed", error=str(e))
            sys.exit(1)

    return wrapper


def handle_result(result: CommandResult, ctx: CLIContext) -> None:
    """Handle command result output."""
    if result.success:
        if result.message:
            console.print(f"✅ {result.message}", style="green")
        if result.data and ctx.verbose:
            console.print_json(data=result.data)
    else:
        console.print(f"❌ {result.message}", style="red")
        if result.data and ctx.debug:
            console.print_json(data=result.data)

    if not result.success:
        sys.exit(result.exit_code)


def normalize_url(url: str) -> str:
    """Add https:// when no scheme is given and validate the result."""
    url = url.strip()
    if "://" not in url:
        url = f"https://{url}"

    parsed = urlparse(url)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise CLIError(f"Unsupported URL scheme: {parsed.scheme}")
    if parsed.scheme.lower() != "file" and not parsed.hostname:
        raise CLIError(f"Invalid URL: {url}")
    return url


async def resolve_target(registry: TargetRegistry, ref: str) -> TrackedTarget:
    """Find a target by full id or unique id prefix."""
    target = await registry.get_target(ref)
    if target:
        return target

    matches = [t for t in await registry.list_targets() if t.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise CLIError(f"Ambiguous target id: {ref}")
    raise CLIError(f"Target not found: {ref}")


def format_time(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "Never"


def print_reports(reports: list[CheckReport]) -> None:
    table = Table(title="Check Results")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("URL", style="blue")
    table.add_column("Result", justify="center")
    table.add_column("Strategy", style="yellow")
    table.add_column("Notified", justify="center")
    table.add_column("Details", style="dim")

    for report in reports:
        table.add_row(
            report.target_id[:8],
            report.url or "",
            STATUS_STYLES[report.status],
            report.strategy or "-",
            "yes" if report.notified else "no",
            report.error or "",
        )

    console.print(table)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(ctx, verbose: bool, debug: bool) -> None:
    """PageWatch - Web page change monitoring and notification."""
    ctx.obj = CLIContext(verbose=verbose, debug=debug)

    if debug:
        setup_logging(log_level="DEBUG")
    elif verbose:
        setup_logging(log_level="INFO")
    else:
        setup_logging(log_level="WARNING")


@cli.command()
@click.argument("url")
@click.option("--name", help="Display name (defaults to the host name)")
@click.option("--selector", help="CSS selector limiting the monitored content")
@click.option(
    "--interval", type=click.IntRange(min=1), help="Minutes between checks"
)
@click.pass_obj
@async_command
async def add(
    ctx: CLIContext,
    url: str,
    name: Optional[str],
    selector: Optional[str],
    interval: Optional[int],
) -> None:
    """Add a page for monitoring."""
    url = normalize_url(url)

    try:
        registry = await get_registry()

        if await registry.find_by_url(url):
            result = CommandResult(
                success=False, message=f"Page already tracked: {url}", exit_code=1
            )
            handle_result(result, ctx)
            return

        target = await registry.register(
            url, name=name, selector=selector, interval=interval
        )
    finally:
        await cleanup_registry()

    result = CommandResult(
        success=True,
        message=f"Tracking {target.name} ({target.url})",
        data={"target_id": target.id, "interval": target.interval},
    )
    handle_result(result, ctx)


@cli.command()
@click.argument("target_id")
@click.option("--force", is_flag=True, help="Force removal without confirmation")
@click.pass_obj
@async_command
async def remove(ctx: CLIContext, target_id: str, force: bool) -> None:
    """Stop tracking a page."""
    try:
        registry = await get_registry()
        target = await resolve_target(registry, target_id)

        if not force:
            if not click.confirm(f"Remove '{target.name}' ({target.url})?"):
                console.print("❌ Operation cancelled", style="yellow")
                return

        await registry.delete(target.id)
    finally:
        await cleanup_registry()

    result = CommandResult(
        success=True,
        message=f"Removed {target.name}",
        data={"target_id": target.id},
    )
    handle_result(result, ctx)


@cli.command(name="list")
@click.option(
    "--status", type=click.Choice(["active", "paused", "all"]), default="all"
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TABLE.value,
)
@click.pass_obj
@async_command
async def list_targets(ctx: CLIContext, status: str, output_format: str) -> None:
    """List tracked pages."""
    try:
        registry = await get_registry()
        targets = await registry.list_targets()
    finally:
        await cleanup_registry()

    if status != "all":
        targets = [t for t in targets if t.active == (status == "active")]

    if output_format == OutputFormat.JSON.value:
        console.print_json(
            data=[
                {
                    "id": t.id,
                    "name": t.name,
                    "url": t.url,
                    "selector": t.selector,
                    "interval": t.interval,
                    "status": "active" if t.active else "paused",
                    "last_checked": t.last_checked_at.isoformat()
                    if t.last_checked_at
                    else None,
                    "last_notified": t.last_notified_at.isoformat()
                    if t.last_notified_at
                    else None,
                }
                for t in targets
            ]
        )
    else:
        default_interval = get_settings().monitor.default_interval_minutes

        table = Table()
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name", style="green")
        table.add_column("URL", style="blue")
        table.add_column("Selector")
        table.add_column("Interval", justify="right")
        table.add_column("Status", justify="center")
        table.add_column("Last Checked", style="yellow")

        for t in targets:
            table.add_row(
                t.id[:8],
                t.name,
                t.url,
                t.selector or "-",
                f"{t.effective_interval(default_interval)}m",
                "🟢 Active" if t.active else "⏸️ Paused",
                format_time(t.last_checked_at),
            )

        console.print(table)

    if ctx.verbose:
        handle_result(
            CommandResult(success=True, message=f"Found {len(targets)} pages"), ctx
        )


async def _set_active(ctx: CLIContext, target_id: str, active: bool) -> None:
    try:
        registry = await get_registry()
        target = await resolve_target(registry, target_id)
        await registry.set_active(target.id, active)
    finally:
        await cleanup_registry()

    verb = "Resumed" if active else "Paused"
    handle_result(CommandResult(success=True, message=f"{verb} {target.name}"), ctx)


@cli.command()
@click.argument("target_id")
@click.pass_obj
@async_command
async def pause(ctx: CLIContext, target_id: str) -> None:
    """Pause checks of a page."""
    await _set_active(ctx, target_id, False)


@cli.command()
@click.argument("target_id")
@click.pass_obj
@async_command
async def resume(ctx: CLIContext, target_id: str) -> None:
    """Resume checks of a paused page."""
    await _set_active(ctx, target_id, True)


@cli.command()
@click.argument("target_id", required=False)
@click.pass_obj
@async_command
async def check(ctx: CLIContext, target_id: Optional[str]) -> None:
    """Check one page, or every active page, right now."""
    try:
        registry = await get_registry()
        monitor = await get_change_monitor()

        if target_id:
            target = await resolve_target(registry, target_id)
            reports = [await monitor.check_with_timeout(target.id, force=True)]
        else:
            reports = await monitor.run_cycle(only_due=False)
    finally:
        await cleanup_change_monitor()
        await cleanup_registry()

    if reports:
        print_reports(reports)

    failed = [r for r in reports if r.status == CheckStatus.FAILED]
    result = CommandResult(
        success=not failed,
        message=f"Checked {len(reports)} pages, {len(failed)} failed",
        data={"changed": sum(1 for r in reports if r.status == CheckStatus.CHANGED)},
        exit_code=1 if failed else 0,
    )
    handle_result(result, ctx)


@cli.command()
@click.option(
    "--live/--no-live",
    default=True,
    help="Keep tracked pages open and react to content changes as they happen",
)
@click.pass_obj
@async_command
async def run(ctx: CLIContext, live: bool) -> None:
    """Run scheduled monitoring until interrupted."""
    settings = get_settings()
    setup_logging(
        log_level="DEBUG" if ctx.debug else settings.log_level,
        json_logs=settings.json_logs,
    )

    registry = await get_registry()
    monitor = await get_change_monitor()
    scheduler = SchedulerManager(monitor, settings.monitor)
    watcher: Optional[RealtimeWatcher] = None

    try:
        await scheduler.setup()

        if live:
            watcher = RealtimeWatcher(
                registry,
                monitor.browser,
                monitor.provider,
                monitor.handle_change_signal,
                settings.monitor,
                settings.scraping,
            )
            await watcher.setup()

        if settings.slack.enabled and settings.slack.app_token.get_secret_value():
            from ..notification.slack import get_slack_manager

            slack_manager = await get_slack_manager(settings.slack)
            await slack_manager.start_socket_mode()

        console.print(
            f"🚀 Monitoring started ({settings.monitor.schedule_mode} schedule,"
            f" live={'on' if live else 'off'}). Press Ctrl+C to stop.",
            style="bold blue",
        )

        while True:
            await asyncio.sleep(WATCHER_SYNC_SECONDS)
            if watcher:
                await watcher.sync()
    finally:
        if watcher:
            await watcher.cleanup()
        await scheduler.cleanup()
        await cleanup_change_monitor()
        await cleanup_registry()


@cli.command(name="import")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
@async_command
async def import_sites(ctx: CLIContext, config_file: str) -> None:
    """Register pages listed in a YAML configuration file."""
    loader = ConfigLoader(Path(config_file))
    sites = loader.get_sites_config()
    global_config = loader.get_global_config()

    added, skipped = 0, 0
    try:
        registry = await get_registry()
        for site in sites:
            url = normalize_url(site.url)
            if await registry.find_by_url(url):
                skipped += 1
                continue

            await registry.register(
                url,
                name=site.name,
                selector=site.selector,
                interval=site.interval or global_config.default_interval,
                active=site.active,
            )
            added += 1
    finally:
        await cleanup_registry()

    result = CommandResult(
        success=True,
        message=f"Imported {added} pages ({skipped} already tracked)",
        data={"added": added, "skipped": skipped},
    )
    handle_result(result, ctx)


def create_cli() -> click.Group:
    """Create and return the CLI application."""
    return cli


if __name__ == "__main__":
    cli()
