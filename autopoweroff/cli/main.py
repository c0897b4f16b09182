import asyncio
import signal
import sys

import click

from autopoweroff import __version__
from autopoweroff.pisugar.client import PiSugarClient
from autopoweroff.pisugar.models import ProbeStatus
from autopoweroff.pisugar.probe import StatusProbe
from autopoweroff.utils.logging import setup_logging
from autopoweroff.watchdog.core import ShutdownWatchdog

from .utils import console, duration_option, handle_async_command, load_settings


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enables verbose mode.')
@click.option('--quiet', '-q', is_flag=True, help='Enables quiet mode.')
@click.version_option(__version__, prog_name='autopoweroff')
@click.pass_context
def app(ctx, verbose, quiet):
    """
    Battery-aware shutdown watchdog for PiSugar powered boards.
    """
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet

    if verbose:
        setup_logging(level="DEBUG")
    elif quiet:
        setup_logging(level="ERROR")
    else:
        setup_logging()


def status_service_options(func):
    func = click.option('--probe-timeout', type=float, default=None,
                        help='Seconds to wait for the status service.')(func)
    func = click.option('--port', type=int, default=None, help='Status service port.')(func)
    func = click.option('--host', default=None, help='Status service host.')(func)
    return func


@app.command()
@click.option('--grace-period', callback=duration_option, default=None,
              help="Time without external power before shutdown, e.g. '60s' or '2m'.")
@click.option('--tick-interval', callback=duration_option, default=None,
              help="Time between status checks, e.g. '1s'.")
@status_service_options
@click.option('--shutdown-command', default=None, help='Command that powers the system off.')
@click.option('--dry-run', is_flag=True, default=False, help='Log the shutdown instead of running it.')
@handle_async_command
async def run(grace_period, tick_interval, host, port, probe_timeout, shutdown_command, dry_run) -> None:
    """Runs the watchdog until power has been absent for the grace period."""
    config = load_settings(
        GRACE_PERIOD_SECONDS=grace_period,
        TICK_INTERVAL_SECONDS=tick_interval,
        STATUS_HOST=host,
        STATUS_PORT=port,
        PROBE_TIMEOUT=probe_timeout,
        SHUTDOWN_COMMAND=shutdown_command,
        DRY_RUN=dry_run or None,
    )
    watchdog = ShutdownWatchdog.from_settings(config)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, watchdog.stop)
    try:
        result = await watchdog.run()
    finally:
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)

    if result is not None and not result.success:
        console.print(f"[red]Shutdown failed: {result.error_message}[/red]")
        sys.exit(1)


@app.command()
@status_service_options
@handle_async_command
async def probe(host, port, probe_timeout) -> None:
    """Queries the status service once and shows how the watchdog reads it."""
    config = load_settings(STATUS_HOST=host, STATUS_PORT=port, PROBE_TIMEOUT=probe_timeout)
    client = PiSugarClient(host=config.STATUS_HOST, port=config.STATUS_PORT, timeout=config.PROBE_TIMEOUT)
    outcome = await StatusProbe(client).query()

    colour = {
        ProbeStatus.PLUGGED: "green",
        ProbeStatus.UNPLUGGED: "yellow",
    }.get(outcome.status, "red")
    console.print(f"[bold blue]Probing {config.STATUS_HOST}:{config.STATUS_PORT}[/bold blue]")
    console.print(f"[cyan]Probe Status[/cyan]: [{colour}]{outcome.status.value}[/{colour}]")
    console.print(f"[cyan]Power State[/cyan]: {outcome.power_state.value}")
    console.print(f"[cyan]Latency[/cyan]: {outcome.latency_ms} ms")
    if outcome.error:
        console.print(f"[cyan]Error[/cyan]: {outcome.error}")


@app.command()
@status_service_options
@handle_async_command
async def status(host, port, probe_timeout) -> None:
    """Shows the battery level and whether external power is connected."""
    config = load_settings(STATUS_HOST=host, STATUS_PORT=port, PROBE_TIMEOUT=probe_timeout)
    client = PiSugarClient(host=config.STATUS_HOST, port=config.STATUS_PORT, timeout=config.PROBE_TIMEOUT)
    battery = await client.get_battery_status()

    console.print("[bold blue]Battery Status[/bold blue]")
    plugged = "[green]yes[/green]" if battery.plugged else "[yellow]no[/yellow]"
    console.print(f"[cyan]Battery Level[/cyan]: {battery.level:.0f}%")
    console.print(f"[cyan]Power Plugged[/cyan]: {plugged}")


if __name__ == '__main__':
    app()
