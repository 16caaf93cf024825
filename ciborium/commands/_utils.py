"""Shared helpers for CIBorium CLI commands."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from ciborium.build import Build, Node
from ciborium.config import CiboriumConfig
from ciborium.constants import ENV_BUILD_NUMBER, ENV_JOB_NAME


def build_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options identifying a build to a command."""
    options = [
        click.option("--job", "-j", "job_name", help="Job name (default: $JOB_NAME or config)"),
        click.option("--number", "-n", type=int, help="Build number (default: $BUILD_NUMBER or 1)"),
        click.option(
            "--workspace",
            "-w",
            type=click.Path(file_okay=False, path_type=Path),
            help="Workspace directory (default: current directory)",
        ),
        click.option("--hostname", help="Hostname given to containers (default: this host)"),
        click.option(
            "--config",
            "config_path",
            type=click.Path(dir_okay=False, path_type=Path),
            help="Config file (default: .ciborium/config.yaml)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_build(
    config: CiboriumConfig,
    job_name: str | None,
    number: int | None,
    workspace: Path | None,
    hostname: str | None,
) -> Build:
    """Create the Build for a command from options, environment and config.

    Raises:
        click.UsageError: If no job name can be found
    """
    job_name = job_name or os.environ.get(ENV_JOB_NAME) or config.pipeline.job_name
    if not job_name:
        raise click.UsageError("No job name: pass --job, set JOB_NAME, or set pipeline.job_name in config")

    if number is None:
        raw = os.environ.get(ENV_BUILD_NUMBER, "1")
        try:
            number = int(raw)
        except ValueError:
            raise click.UsageError(f"BUILD_NUMBER is not a number: {raw!r}") from None

    return Build(
        job_name=job_name,
        number=number,
        workspace=workspace or Path.cwd(),
        built_on=Node(hostname_override=hostname),
    )


def apply_overrides(
    config: CiboriumConfig,
    image: str | None,
    include_env: str | None,
    docker_opts: str | None,
) -> CiboriumConfig:
    """Return config with command-line wrapper settings applied."""
    updates = {
        key: value
        for key, value in (
            ("docker_image", image),
            ("include_environment", include_env),
            ("docker_opts", docker_opts),
        )
        if value is not None
    }
    if not updates:
        return config
    return config.model_copy(update={"wrapper": config.wrapper.model_copy(update=updates)})


def wrapper_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the docker wrapper overrides to a command."""
    options = [
        click.option("--image", "-i", help="Docker image (default: derived from job name)"),
        click.option("--include-env", help="Build variables forwarded into containers, e.g. 'PATH HOME'"),
        click.option("--docker-opts", help="Extra options passed to docker run"),
    ]
    for option in reversed(options):
        func = option(func)
    return func
