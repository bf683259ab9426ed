"""
Base classes for wrapping external executables.

Provides a consistent interface for locating and executing the phase
executables and decompression filters, with explicit control over the
child environment and the descriptors a child inherits.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from kraken2_iter.core.exceptions import Kraken2IterError

logger = logging.getLogger(__name__)

ExecutableResolver = Callable[..., str | None]


class ToolNotFoundError(Kraken2IterError):
    """Raised when a required external tool is not installed or not in PATH."""

    def __init__(self, tool_name: str, install_hint: str = ""):
        suggestion = f"Install {tool_name} and ensure it is in your PATH."
        if install_hint:
            suggestion = f"{suggestion}\n\n{install_hint}"

        super().__init__(
            message=f"Required tool '{tool_name}' not found in PATH",
            suggestion=suggestion,
        )
        self.tool_name = tool_name


@dataclass(frozen=True)
class ToolResult:
    """Result from running an external tool.

    Attributes:
        command: The command that was executed.
        return_code: Exit code from the process (negative if killed by a signal).
        elapsed_seconds: Wall-clock time for execution.
    """

    command: tuple[str, ...]
    return_code: int
    elapsed_seconds: float

    @property
    def success(self) -> bool:
        """Return True if the tool exited with code 0."""
        return self.return_code == 0

    @property
    def command_string(self) -> str:
        """Return the command as a space-separated string."""
        return " ".join(self.command)


class ExternalTool(ABC):
    """Abstract base class for wrapping external command-line tools.

    Subclasses must define:
        TOOL_NAME: Primary executable name (e.g., "classify")
        build_command: Method to construct the command arguments

    Optional class attributes:
        TOOL_ALIASES: Alternative executable names to search
        INSTALL_HINT: Instructions for installing the tool

    Instances take an optional search path (PATH-style string). When it is
    None the resolver falls back to the process PATH.

    Dependency injection:
        Use set_executable_resolver() to inject a custom resolver for testing.
    """

    TOOL_NAME: ClassVar[str]
    TOOL_ALIASES: ClassVar[tuple[str, ...]] = ()
    INSTALL_HINT: ClassVar[str] = ""

    _executable_cache: ClassVar[dict[tuple[str, str | None], Path | None]] = {}
    _executable_resolver: ClassVar[ExecutableResolver] = staticmethod(shutil.which)

    def __init__(self, search_path: str | None = None):
        self.search_path = search_path

    def check_available(self) -> bool:
        """Check if the tool can be found on the search path."""
        try:
            self.get_executable()
            return True
        except ToolNotFoundError:
            return False

    def get_executable(self) -> Path:
        """Find the tool executable.

        Returns:
            Path to the executable.

        Raises:
            ToolNotFoundError: If the tool cannot be found.
        """
        key = (self.TOOL_NAME, self.search_path)
        if key in ExternalTool._executable_cache:
            cached = ExternalTool._executable_cache[key]
            if cached is not None:
                return cached
            raise ToolNotFoundError(self.TOOL_NAME, self.INSTALL_HINT)

        for name in (self.TOOL_NAME, *self.TOOL_ALIASES):
            exe_path = self._executable_resolver(name, path=self.search_path)
            if exe_path:
                path = Path(exe_path)
                ExternalTool._executable_cache[key] = path
                logger.debug("Resolved %s to %s", self.TOOL_NAME, path)
                return path

        ExternalTool._executable_cache[key] = None
        raise ToolNotFoundError(self.TOOL_NAME, self.INSTALL_HINT)

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the executable location cache."""
        ExternalTool._executable_cache.clear()

    @classmethod
    def set_executable_resolver(cls, resolver: ExecutableResolver) -> None:
        """Inject a custom executable resolver for testing.

        Args:
            resolver: Function called as resolver(name, path=search_path)
                that returns the executable path or None if not found.
        """
        ExternalTool._executable_resolver = staticmethod(resolver)
        cls.clear_cache()

    @classmethod
    def reset_executable_resolver(cls) -> None:
        """Reset the executable resolver to the default (shutil.which)."""
        ExternalTool._executable_resolver = staticmethod(shutil.which)
        cls.clear_cache()

    @abstractmethod
    def build_command(self, **kwargs: object) -> list[str]:
        """Build the command-line arguments for this tool.

        Returns:
            List of command-line arguments (including the executable).
        """
        ...

    def run(
        self,
        *,
        env: Mapping[str, str] | None = None,
        pass_fds: Collection[int] = (),
        **kwargs: object,
    ) -> ToolResult:
        """Execute the tool and wait for it to finish.

        Standard streams are inherited so the tool writes directly to the
        caller's terminal or redirections. There is no timeout.

        Args:
            env: Environment for the child (None inherits the current one).
            pass_fds: Descriptors the child inherits in addition to stdio.
            **kwargs: Arguments passed to build_command().

        Returns:
            ToolResult with command, exit code, and elapsed time.

        Raises:
            ToolNotFoundError: If the tool is not installed.
        """
        command = self.build_command(**kwargs)
        logger.debug("Running %s", " ".join(command))

        start_time = time.perf_counter()
        try:
            result = subprocess.run(
                command,
                env=env,
                pass_fds=tuple(pass_fds),
                check=False,
            )
        except FileNotFoundError as e:
            # Executable vanished between lookup and run
            raise ToolNotFoundError(self.TOOL_NAME, self.INSTALL_HINT) from e
        elapsed = time.perf_counter() - start_time

        return ToolResult(
            command=tuple(command),
            return_code=result.returncode,
            elapsed_seconds=elapsed,
        )

    def spawn(
        self,
        *,
        env: Mapping[str, str] | None = None,
        **kwargs: object,
    ) -> subprocess.Popen[bytes]:
        """Start the tool with its stdout connected to a new pipe.

        The caller owns the returned process and must read or close
        its stdout and wait for it.

        Raises:
            ToolNotFoundError: If the tool is not installed.
            OSError: If the process cannot be created.
        """
        command = self.build_command(**kwargs)
        logger.debug("Spawning %s", " ".join(command))
        return subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            env=env,
        )
