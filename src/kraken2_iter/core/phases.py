"""
Sequencing of the two engine phases.

The search phase (if enabled) runs to completion before the classify phase
starts, because classification reads the additional hash map that the search
phase updates. Phases run one at a time with no timeout.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from kraken2_iter.core.compression import CompressionMode
from kraken2_iter.core.decompression import DecompressionPipeManager
from kraken2_iter.core.exceptions import (
    ClassifyPhaseFailedError,
    PhaseExecutionError,
    SearchPhaseFailedError,
)
from kraken2_iter.external.engine import ClassifyPhase, EnginePhase, SearchPhase
from kraken2_iter.models.config import RuntimeEnvironment

logger = logging.getLogger(__name__)


class PhaseState(str, Enum):
    IDLE = "idle"
    BUILDING_MAP = "building_map"
    CLASSIFYING = "classifying"
    DONE = "done"


@dataclass(frozen=True)
class PhaseTiming:
    """Completed phase and its wall-clock duration."""

    state: PhaseState
    command: tuple[str, ...]
    elapsed_seconds: float


class PhaseInvoker:
    """Run the search and classify phases with a shared flag vector.

    Attributes:
        state: Current state (IDLE -> BUILDING_MAP -> CLASSIFYING -> DONE).
        timings: One entry per phase that completed successfully.
    """

    def __init__(
        self,
        flags: Sequence[str],
        inputs: Sequence[str],
        *,
        compression: CompressionMode = CompressionMode.NONE,
        environment: RuntimeEnvironment | None = None,
        search_phase: EnginePhase | None = None,
        classify_phase: EnginePhase | None = None,
        on_phase_complete: Callable[[PhaseTiming], None] | None = None,
    ):
        self.flags = tuple(flags)
        self.inputs = list(inputs)
        self.compression = compression
        self.environment = environment or RuntimeEnvironment()

        search_path = self.environment.executable_search_path
        self.search_phase = search_phase or SearchPhase(search_path=search_path)
        self.classify_phase = classify_phase or ClassifyPhase(search_path=search_path)
        self.on_phase_complete = on_phase_complete

        self.state = PhaseState.IDLE
        self.timings: list[PhaseTiming] = []

    def run(self, *, build_map: bool = True, classify: bool = True) -> list[PhaseTiming]:
        """Run the enabled phases in order.

        Args:
            build_map: Run the search phase.
            classify: Run the classify phase.

        Returns:
            Timings of the phases that ran.

        Raises:
            SearchPhaseFailedError: If the search phase exits non-zero.
            ClassifyPhaseFailedError: If the classify phase exits non-zero.
            DecompressionSpawnError, DescriptorFlagError: From the input pipes.
            DecompressionFailedError: If a filter fails while a phase reads it.
            ToolNotFoundError: If a phase executable cannot be found.
        """
        if build_map:
            self._run_phase(
                PhaseState.BUILDING_MAP,
                self.search_phase,
                SearchPhaseFailedError,
            )
        if classify:
            self._run_phase(
                PhaseState.CLASSIFYING,
                self.classify_phase,
                ClassifyPhaseFailedError,
            )

        self.state = PhaseState.DONE
        return self.timings

    def _run_phase(
        self,
        state: PhaseState,
        tool: EnginePhase,
        failure: type[PhaseExecutionError],
    ) -> None:
        self.state = state
        env = self.environment.child_env()

        with DecompressionPipeManager(
            self.compression,
            self.inputs,
            search_path=self.environment.executable_search_path,
            env=env,
        ) as pipes:
            result = tool.run(
                flags=self.flags,
                inputs=pipes.inputs,
                env=env,
                pass_fds=pipes.pass_fds,
            )
            if not result.success:
                logger.debug("Failed command: %s", result.command_string)
                raise failure(result.return_code)

        timing = PhaseTiming(
            state=state,
            command=result.command,
            elapsed_seconds=result.elapsed_seconds,
        )
        self.timings.append(timing)
        if self.on_phase_complete is not None:
            self.on_phase_complete(timing)
