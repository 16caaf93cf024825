"""CIBorium command command - show the docker run prefix for a build."""

import json
import shlex
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ciborium.commands._utils import apply_overrides, build_options, resolve_build, wrapper_options
from ciborium.config import CiboriumConfig
from ciborium.exceptions import CiboriumError
from ciborium.wrapper import DockerBuildWrapper

console = Console()


@click.command()
@build_options
@wrapper_options
@click.option("--json", "json_output", is_flag=True, help="Print the argument vector as JSON")
def command(
    job_name: str | None,
    number: int | None,
    workspace: Path | None,
    hostname: str | None,
    config_path: Path | None,
    image: str | None,
    include_env: str | None,
    docker_opts: str | None,
    json_output: bool,
) -> None:
    """Show the docker run prefix steps of a build would get.

    Nothing is executed.

    Examples:

        ciborium command --job app --number 7

        ciborium command -j app --include-env PATH --json
    """
    try:
        config = apply_overrides(CiboriumConfig.load(config_path), image, include_env, docker_opts)
        build = resolve_build(config, job_name, number, workspace, hostname)
        invocation = DockerBuildWrapper(config.wrapper, config.teardown).invocation(build)
    except CiboriumError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None

    if json_output:
        console.print(json.dumps(invocation.as_list()), markup=False, highlight=False, soft_wrap=True)
        return

    table = Table(title=f"Container for {build.tag}")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("Container", invocation.container_name)
    table.add_row("Image", invocation.image)
    table.add_row("Workspace", str(build.workspace))
    console.print(table)
    console.print(shlex.join(invocation.args), markup=False, highlight=False, soft_wrap=True)
