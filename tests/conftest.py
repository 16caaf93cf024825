"""Pytest configuration and fixtures for CIBorium tests."""

import io
from collections.abc import Generator
from pathlib import Path

import pytest

from ciborium.build import Build
from ciborium.config import WrapperConfig
from ciborium.listener import BuildListener
from ciborium.logging import clear_build_context
from tests.mocks import MockNode


@pytest.fixture(autouse=True)
def _clear_build_context() -> Generator[None, None, None]:
    """Keep build context from leaking between tests."""
    yield
    clear_build_context()


@pytest.fixture
def log_stream() -> io.StringIO:
    """Text buffer receiving the build log."""
    return io.StringIO()


@pytest.fixture
def listener(log_stream: io.StringIO) -> BuildListener:
    """Build listener writing into log_stream."""
    return BuildListener(log_stream)


@pytest.fixture
def node() -> MockNode:
    """Node named node1 with a recording launcher."""
    return MockNode(name="node1", hostname_override="node1")


@pytest.fixture
def build(tmp_path: Path, node: MockNode) -> Build:
    """Build #42 of job 'build' with an isolated workspace and temp dir.

    Host environment is not inherited, so tests see a fixed environment.
    """
    tmp_dir = tmp_path / "tmp"
    tmp_dir.mkdir()
    return Build(
        job_name="build",
        number=42,
        workspace=tmp_path / "ws",
        built_on=node,
        extra_env={"PATH": "/usr/bin", "HOME": "/home/ci", "SECRET": "x"},
        tmp_dir=tmp_dir,
        inherit_env=False,
        cookie="cookie-42",
    )


@pytest.fixture
def wrapper_config() -> WrapperConfig:
    """Wrapper config with an explicit image and a PATH/HOME allowlist."""
    return WrapperConfig(docker_image="ubuntu", include_environment="PATH HOME")
