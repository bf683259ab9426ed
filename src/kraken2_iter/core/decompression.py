"""
Decompression pipes for compressed input files.

Each compressed input gets its own `gzip -dc` or `bzip2 -dc` filter process.
The read end of the filter's stdout pipe is marked inheritable and passed to
the phase executable, which opens it through its /dev/fd path in place of
the original filename. Every other descriptor keeps Python's default
close-on-exec behaviour.

A pipe can only be read once, so a fresh set of filters is started for each
phase that consumes the inputs.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import TracebackType

from kraken2_iter.core.compression import CompressionMode
from kraken2_iter.core.exceptions import (
    DecompressionFailedError,
    DecompressionSpawnError,
    DescriptorFlagError,
)
from kraken2_iter.external.base import ExternalTool, ToolNotFoundError
from kraken2_iter.external.compression import Bzip2, Gzip

logger = logging.getLogger(__name__)

_FILTERS: dict[CompressionMode, type[ExternalTool]] = {
    CompressionMode.GZIP: Gzip,
    CompressionMode.BZIP2: Bzip2,
}


def descriptor_path(fd: int) -> str:
    """Filesystem path through which a child process can open an inherited descriptor."""
    return f"/dev/fd/{fd}"


@dataclass
class PipeHandle:
    """A running decompression filter and the read end of its output."""

    source: str
    tool_name: str
    process: subprocess.Popen[bytes]
    fd: int

    @property
    def path(self) -> str:
        return descriptor_path(self.fd)

    def release(self) -> int:
        """Close our copy of the read end and reap the filter.

        Returns:
            The filter's exit status.
        """
        if self.process.stdout is not None:
            self.process.stdout.close()
        return self.process.wait()


class DecompressionPipeManager:
    """Spawn decompression filters and substitute their streams for input paths.

    Use as a context manager around one phase invocation:

        >>> with DecompressionPipeManager(CompressionMode.GZIP, inputs) as pipes:
        ...     tool.run(inputs=pipes.inputs, pass_fds=pipes.pass_fds, ...)

    With CompressionMode.NONE the inputs pass through unchanged and no
    process is started.
    """

    def __init__(
        self,
        mode: CompressionMode,
        inputs: Sequence[str],
        *,
        search_path: str | None = None,
        env: Mapping[str, str] | None = None,
    ):
        self.mode = mode
        self.sources = list(inputs)
        self.search_path = search_path
        self.env = env
        self.handles: list[PipeHandle] = []

    @property
    def active(self) -> bool:
        return self.mode is not CompressionMode.NONE

    @property
    def inputs(self) -> list[str]:
        """Input paths to hand to a phase: stream paths when decompressing."""
        if not self.active:
            return list(self.sources)
        return [handle.path for handle in self.handles]

    @property
    def pass_fds(self) -> tuple[int, ...]:
        """Descriptors that must survive into the phase process."""
        return tuple(handle.fd for handle in self.handles)

    def open(self) -> list[str]:
        """Start one filter per input.

        Returns:
            The rewritten input paths.

        Raises:
            DecompressionSpawnError: If a filter cannot be started.
            DescriptorFlagError: If a pipe cannot be made inheritable.
        """
        if not self.active:
            return self.inputs

        tool = _FILTERS[self.mode](search_path=self.search_path)
        try:
            for source in self.sources:
                handle = self._spawn(tool, source)
                self.handles.append(handle)
                try:
                    os.set_inheritable(handle.fd, True)
                except OSError as e:
                    raise DescriptorFlagError(handle.fd, e) from e
        except BaseException:
            self.close()
            raise

        return self.inputs

    def _spawn(self, tool: ExternalTool, source: str) -> PipeHandle:
        try:
            process = tool.spawn(path=source, env=self.env)
        except (ToolNotFoundError, OSError) as e:
            raise DecompressionSpawnError(tool.TOOL_NAME, source, e) from e
        if process.stdout is None:
            process.kill()
            process.wait()
            raise DecompressionSpawnError(tool.TOOL_NAME, source, OSError("no output pipe"))

        handle = PipeHandle(
            source=source,
            tool_name=tool.TOOL_NAME,
            process=process,
            fd=process.stdout.fileno(),
        )
        logger.debug("Streaming %s through %s", source, handle.path)
        return handle

    def close(self) -> list[tuple[PipeHandle, int]]:
        """Release every pipe and wait for the filters to exit.

        Returns:
            Handles whose filter exited with a positive status, with that
            status. Deaths by signal are not included: a filter gets
            SIGPIPE when its consumer stops reading early.
        """
        failed: list[tuple[PipeHandle, int]] = []
        for handle in self.handles:
            status = handle.release()
            if status > 0:
                failed.append((handle, status))
            elif status < 0:
                logger.debug("Decompression of %s ended by signal %d", handle.source, -status)
        self.handles.clear()
        return failed

    def __enter__(self) -> DecompressionPipeManager:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Release the pipes.

        Raises:
            DecompressionFailedError: If the block completed but a filter
                reported an error, so the consumer saw a damaged stream.
        """
        failed = self.close()
        if exc_type is None and failed:
            handle, status = failed[0]
            raise DecompressionFailedError(handle.tool_name, handle.source, status)
