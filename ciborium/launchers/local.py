"""LocalLauncher for running build processes on this machine.

Uses subprocess.Popen. Output is streamed into the build log unless the
request asks to capture it, in which case it is kept on the returned proc.
"""

from __future__ import annotations

import os
import subprocess
import threading
from pathlib import Path
from typing import BinaryIO

from ciborium.launch_types import LaunchRequest
from ciborium.launchers.base import Channel, Launcher, Proc
from ciborium.listener import BuildListener
from ciborium.logging import get_logger

logger = get_logger("launcher")

KILL_TIMEOUT_SECONDS = 10


def _merged_env(overrides: dict[str, str] | None) -> dict[str, str]:
    env = os.environ.copy()
    if overrides:
        env.update(overrides)
    return env


def _stop(process: subprocess.Popen[bytes]) -> None:
    """Terminate a process, escalating to SIGKILL if it does not exit."""
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=KILL_TIMEOUT_SECONDS)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()


class LocalProc(Proc):
    """Handle to a process started by LocalLauncher."""

    def __init__(
        self,
        process: subprocess.Popen[bytes],
        request: LaunchRequest,
        listener: BuildListener,
    ) -> None:
        self._process = process
        self._request = request
        self._listener = listener
        self._stdout: bytes | None = None
        self._stderr: bytes | None = None
        self._returncode: int | None = None

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def stdout(self) -> bytes | None:
        return self._stdout

    @property
    def stderr(self) -> bytes | None:
        return self._stderr

    def _forward(self, data: bytes | None) -> None:
        if not data:
            return
        if self._request.stdout is not None:
            self._request.stdout.write(data)
        else:
            self._listener.write_bytes(data)

    def join(self) -> int:
        """Wait for exit, forwarding or capturing output.

        Returns:
            Exit status
        """
        if self._returncode is not None:
            return self._returncode

        if self._request.read_stdout or self._request.read_stderr:
            out, err = self._process.communicate()
            if self._request.read_stdout:
                self._stdout = out
            else:
                self._forward(out)
            if self._request.read_stderr:
                self._stderr = err
            else:
                self._forward(err)
        else:
            assert self._process.stdout is not None
            if self._request.stdout is None:
                self._listener.copy_from(self._process.stdout)
            else:
                for chunk in iter(lambda: self._process.stdout.read(8192), b""):
                    self._request.stdout.write(chunk)
            self._process.wait()

        self._returncode = self._process.returncode
        logger.debug(f"Process {self._process.pid} exited with status {self._returncode}")
        return self._returncode

    def is_alive(self) -> bool:
        return self._process.poll() is None

    def kill(self) -> None:
        _stop(self._process)


class LocalChannel(Channel):
    """Channel over a child process's stdin/stdout pipes."""

    def __init__(self, process: subprocess.Popen[bytes], pump: threading.Thread | None = None) -> None:
        self._process = process
        self._pump = pump

    @property
    def input(self) -> BinaryIO:
        assert self._process.stdin is not None
        return self._process.stdin

    @property
    def output(self) -> BinaryIO:
        assert self._process.stdout is not None
        return self._process.stdout

    def join(self) -> int:
        status = self._process.wait()
        if self._pump is not None:
            self._pump.join()
        return status

    def close(self) -> None:
        if self._process.stdin is not None and not self._process.stdin.closed:
            self._process.stdin.close()
        self.join()


class LocalLauncher(Launcher):
    """Launch build processes as local subprocesses."""

    def __init__(self, listener: BuildListener | None = None) -> None:
        """Initialize local launcher.

        Args:
            listener: Build log receiving launch output
        """
        super().__init__(listener)
        self._started: list[tuple[subprocess.Popen[bytes], dict[str, str]]] = []

    def _track(self, process: subprocess.Popen[bytes], env: dict[str, str]) -> None:
        """Remember a started process for kill(), forgetting those that exited."""
        self._started = [(p, e) for p, e in self._started if p.poll() is None]
        self._started.append((process, env))

    def launch(self, request: LaunchRequest) -> LocalProc:
        """Start a local process.

        Args:
            request: What to run and how

        Returns:
            LocalProc handle

        Raises:
            OSError: If the executable cannot be started
        """
        self.listener.println(f"$ {request.display()}")

        env = _merged_env(request.env)
        capture = request.read_stdout or request.read_stderr
        process = subprocess.Popen(
            request.cmds,
            cwd=request.pwd,
            env=env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE if capture else subprocess.STDOUT,
        )
        self._track(process, env)
        logger.debug(f"Started {request.cmds[0]} with PID {process.pid}")
        return LocalProc(process, request, self.listener)

    def launch_channel(
        self,
        cmd: list[str],
        out: BinaryIO | None,
        work_dir: Path | None,
        env: dict[str, str] | None,
    ) -> LocalChannel:
        """Start a process with piped stdin/stdout; stderr is copied to ``out``."""
        merged = _merged_env(env)
        process = subprocess.Popen(
            cmd,
            cwd=work_dir,
            env=merged,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        self._track(process, merged)

        def _copy_stderr() -> None:
            assert process.stderr is not None
            if out is None:
                self.listener.copy_from(process.stderr)
                return
            for chunk in iter(lambda: process.stderr.read(8192), b""):
                out.write(chunk)

        pump = threading.Thread(target=_copy_stderr, name=f"channel-stderr-{process.pid}", daemon=True)
        pump.start()
        logger.debug(f"Opened channel to {cmd[0]} (PID {process.pid})")
        return LocalChannel(process, pump)

    def kill(self, model_env: dict[str, str]) -> None:
        """Kill every started process whose environment contains ``model_env``."""
        remaining = []
        for process, env in self._started:
            if all(env.get(key) == value for key, value in model_env.items()):
                logger.info(f"Killing PID {process.pid}")
                try:
                    _stop(process)
                except OSError as e:
                    logger.error(f"Failed to kill PID {process.pid}: {e}")
                    remaining.append((process, env))
            elif process.poll() is None:
                remaining.append((process, env))
        self._started = remaining

    def is_unix(self) -> bool:
        return os.name == "posix"
