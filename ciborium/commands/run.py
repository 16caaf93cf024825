"""CIBorium run command - run build steps inside docker containers."""

from pathlib import Path

import click
from rich.console import Console

from ciborium.commands._utils import apply_overrides, build_options, resolve_build, wrapper_options
from ciborium.config import CiboriumConfig
from ciborium.constants import BuildResult
from ciborium.exceptions import CiboriumError
from ciborium.listener import BuildListener
from ciborium.logging import get_logger, setup_logging
from ciborium.pipeline import Pipeline, run_build
from ciborium.wrapper import DockerBuildWrapper

console = Console(stderr=True)
logger = get_logger("run")

EXIT_CODES = {
    BuildResult.SUCCESS: 0,
    BuildResult.FAILURE: 1,
    BuildResult.ABORTED: 130,
}


@click.command()
@click.argument("steps", nargs=-1)
@build_options
@wrapper_options
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"]),
    default=None,
    help="Diagnostic log level (default: from config)",
)
def run(
    steps: tuple[str, ...],
    job_name: str | None,
    number: int | None,
    workspace: Path | None,
    hostname: str | None,
    config_path: Path | None,
    image: str | None,
    include_env: str | None,
    docker_opts: str | None,
    log_level: str | None,
) -> None:
    """Run build steps, each in a new docker container.

    Each STEP is a shell script. Without STEPS, pipeline.steps from the
    config file are used. Steps run in order; the first failing step ends
    the build. The container is stopped and removed afterwards.

    Examples:

        ciborium run --job app --image python:3.12 "make test"

        ciborium run -j app -n 42 --include-env "PATH HOME" "make" "make check"
    """
    try:
        config = apply_overrides(CiboriumConfig.load(config_path), image, include_env, docker_opts)
        setup_logging(
            level=log_level or config.logging.level,
            log_dir=config.logging.directory,
            json_output=config.logging.directory is not None,
            max_bytes=config.logging.max_log_size_mb * 1024 * 1024,
        )

        scripts = list(steps) or config.pipeline.steps
        if not scripts:
            raise click.UsageError("No steps given and none configured in pipeline.steps")

        build = resolve_build(config, job_name, number, workspace, hostname)
        wrapper = DockerBuildWrapper(config.wrapper, config.teardown)

        console.print(f"[bold cyan]CIBorium[/bold cyan] - {build.tag} in [cyan]{build.container_name}[/cyan]")
        result = run_build(build, Pipeline.from_scripts(scripts), wrapper, BuildListener())

    except click.UsageError:
        raise
    except (CiboriumError, OSError) as e:
        logger.error(f"Build could not run: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None

    color = "green" if result == BuildResult.SUCCESS else "red"
    console.print(f"[{color}]{result.value.upper()}[/{color}]")
    raise SystemExit(EXIT_CODES[result])
