"""CIBorium cleanup command - stop and remove a build's container."""

from pathlib import Path

import click
from rich.console import Console

from ciborium.commands._utils import build_options, resolve_build
from ciborium.config import CiboriumConfig
from ciborium.exceptions import CiboriumError
from ciborium.lifecycle import ContainerLifecycleManager
from ciborium.listener import BuildListener
from ciborium.logging import get_logger

console = Console(stderr=True)
logger = get_logger("cleanup")


@click.command()
@build_options
@click.option(
    "--stop-command",
    type=click.Choice(["kill", "stop"]),
    default=None,
    help="Runtime verb used to stop the container (default: from config)",
)
def cleanup(
    job_name: str | None,
    number: int | None,
    workspace: Path | None,
    hostname: str | None,
    config_path: Path | None,
    stop_command: str | None,
) -> None:
    """Stop and remove the container of a build.

    Runs the same teardown a build runs when it finishes; useful after a
    crashed driver. Failures are reported, never fatal.

    Examples:

        ciborium cleanup --job app --number 42
    """
    try:
        config = CiboriumConfig.load(config_path)
        if stop_command:
            config = config.model_copy(update={"teardown": config.teardown.model_copy(update={"stop_command": stop_command})})
        build = resolve_build(config, job_name, number, workspace, hostname)
    except CiboriumError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None

    listener = BuildListener()
    manager = ContainerLifecycleManager(
        build.container_name,
        build.built_on.create_launcher(listener),
        listener,
        stop_command=config.teardown.get_stop_command(),
    )
    report = manager.cleanup()

    if report.clean:
        console.print(f"[green]✓[/green] Removed {report.container_name}")
    else:
        console.print(
            f"[yellow]Cleanup of {report.container_name} finished with statuses "
            f"{report.stop_status} / {report.remove_status}[/yellow]"
        )
