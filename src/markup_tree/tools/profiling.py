"""Performance profiling tools for markup parsing and live tree building.

Times each processing stage (parse, build, index) and samples the resident
memory of the current process through ``psutil``.
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil

from markup_tree.api import MarkupTreeParser
from markup_tree.shared import MarkupTreeConfig, get_logger
from markup_tree.tree import LiveTree

BYTES_PER_MB = 1024 * 1024


@dataclass
class StagePerformance:
    """Performance metrics for a single processing stage."""

    stage_name: str
    start_time: float
    end_time: float
    memory_start: int  # bytes
    memory_end: int  # bytes
    operations_count: int = 0

    @property
    def duration_ms(self) -> float:
        """Processing duration in milliseconds."""
        return (self.end_time - self.start_time) * 1000

    @property
    def memory_delta(self) -> int:
        """Memory usage change in bytes."""
        return self.memory_end - self.memory_start

    @property
    def ops_per_second(self) -> float:
        """Operations per second rate."""
        duration_s = self.end_time - self.start_time
        return self.operations_count / duration_s if duration_s > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage_name": self.stage_name,
            "duration_ms": self.duration_ms,
            "memory_delta": self.memory_delta,
            "operations_count": self.operations_count,
            "ops_per_second": self.ops_per_second,
        }


@dataclass
class ProfilingSession:
    """Container for a complete profiling session."""

    session_id: str
    start_time: float
    end_time: float = 0.0
    input_size: int = 0  # bytes
    stages: List[StagePerformance] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_duration_ms(self) -> float:
        """Total session duration in milliseconds."""
        return (self.end_time - self.start_time) * 1000

    @property
    def throughput_mb_per_s(self) -> float:
        """Processing throughput in MB/s."""
        duration_s = self.end_time - self.start_time
        if duration_s <= 0:
            return 0.0
        return (self.input_size / BYTES_PER_MB) / duration_s

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "input_size": self.input_size,
            "total_duration_ms": self.total_duration_ms,
            "throughput_mb_s": self.throughput_mb_per_s,
            "metadata": self.metadata,
            "stages": [stage.to_dict() for stage in self.stages],
        }


@dataclass
class PerformanceReport:
    """Aggregated performance report over profiling sessions."""

    sessions: List[ProfilingSession]
    generation_time: float

    @property
    def session_count(self) -> int:
        """Total number of profiled sessions."""
        return len(self.sessions)

    @property
    def average_duration_ms(self) -> float:
        """Average processing duration across sessions."""
        if not self.sessions:
            return 0.0
        return sum(s.total_duration_ms for s in self.sessions) / len(self.sessions)

    @property
    def average_throughput_mb_per_s(self) -> float:
        """Average throughput across sessions."""
        if not self.sessions:
            return 0.0
        return sum(s.throughput_mb_per_s for s in self.sessions) / len(self.sessions)

    def stage_averages_ms(self) -> Dict[str, float]:
        """Average duration of each stage across sessions."""
        durations: Dict[str, List[float]] = {}
        for session in self.sessions:
            for stage in session.stages:
                durations.setdefault(stage.stage_name, []).append(stage.duration_ms)
        return {name: sum(values) / len(values) for name, values in durations.items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generation_time": self.generation_time,
            "summary": {
                "session_count": self.session_count,
                "average_duration_ms": self.average_duration_ms,
                "average_throughput_mb_s": self.average_throughput_mb_per_s,
                "stage_averages_ms": self.stage_averages_ms(),
            },
            "sessions": [session.to_dict() for session in self.sessions],
        }


class PerformanceProfiler:
    """Stage profiler for markup parsing operations.

    Examples:
        >>> profiler = PerformanceProfiler()
        >>> with profiler.profile_parsing("session1") as session:
        ...     with profiler.profile_stage(session, "parse"):
        ...         result = parser.parse(markup)
        >>> report = profiler.generate_report()
    """

    def __init__(self, enable_memory_tracking: bool = True) -> None:
        """Initialize performance profiler.

        Args:
            enable_memory_tracking: Whether to sample process RSS around stages
        """
        self.enable_memory_tracking = enable_memory_tracking
        self.sessions: List[ProfilingSession] = []
        self.current_session: Optional[ProfilingSession] = None
        self.logger = get_logger(__name__, None, "performance_profiler")
        self._process = psutil.Process() if enable_memory_tracking else None

    def memory_rss(self) -> int:
        """Resident set size of this process in bytes, 0 when tracking is off."""
        if self._process is None:
            return 0
        return self._process.memory_info().rss

    def start_session(self, session_id: str, input_size: int = 0) -> ProfilingSession:
        """Start a new profiling session.

        Args:
            session_id: Unique identifier for the session
            input_size: Size of input data in bytes

        Returns:
            ProfilingSession object for tracking
        """
        session = ProfilingSession(
            session_id=session_id,
            start_time=time.time(),
            input_size=input_size
        )
        self.current_session = session
        self.logger.debug(
            "Started profiling session",
            extra={"session_id": session_id, "input_size": input_size}
        )
        return session

    def end_session(self, session: ProfilingSession) -> None:
        """End a profiling session and store results."""
        session.end_time = time.time()
        self.sessions.append(session)
        if self.current_session is session:
            self.current_session = None

        self.logger.debug(
            "Ended profiling session",
            extra={
                "session_id": session.session_id,
                "duration_ms": session.total_duration_ms,
                "stage_count": len(session.stages)
            }
        )

    def profile_stage(self, session: ProfilingSession, stage_name: str) -> "StageProfiler":
        """Context manager profiling one stage of ``session``."""
        return StageProfiler(self, session, stage_name)

    def profile_parsing(self, session_id: str) -> "ParsingProfiler":
        """Context manager wrapping a complete profiling session."""
        return ParsingProfiler(self, session_id)

    def generate_report(self) -> PerformanceReport:
        """Generate a report over all finished sessions."""
        return PerformanceReport(
            sessions=self.sessions.copy(),
            generation_time=time.time()
        )

    def save_report(self, report: PerformanceReport, output_path: Path) -> None:
        """Save performance report to a JSON file."""
        output_path.write_text(json.dumps(report.to_dict(), indent=2))
        self.logger.info(
            "Saved performance report",
            extra={"output_path": str(output_path), "session_count": report.session_count}
        )

    def clear_sessions(self) -> None:
        """Clear all stored profiling sessions."""
        session_count = len(self.sessions)
        self.sessions.clear()
        self.current_session = None
        self.logger.info("Cleared profiling sessions", extra={"cleared_count": session_count})


class StageProfiler:
    """Context manager for profiling one processing stage."""

    def __init__(
        self,
        profiler: PerformanceProfiler,
        session: ProfilingSession,
        stage_name: str
    ) -> None:
        self.profiler = profiler
        self.session = session
        self.stage_name = stage_name
        self.stage: Optional[StagePerformance] = None

    def __enter__(self) -> StagePerformance:
        self.stage = StagePerformance(
            stage_name=self.stage_name,
            start_time=time.time(),
            end_time=0.0,
            memory_start=self.profiler.memory_rss(),
            memory_end=0
        )
        return self.stage

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.stage is None:
            return
        self.stage.end_time = time.time()
        self.stage.memory_end = self.profiler.memory_rss()
        self.session.stages.append(self.stage)


class ParsingProfiler:
    """Context manager for profiling a complete session."""

    def __init__(self, profiler: PerformanceProfiler, session_id: str) -> None:
        self.profiler = profiler
        self.session_id = session_id
        self.session: Optional[ProfilingSession] = None

    def __enter__(self) -> ProfilingSession:
        self.session = self.profiler.start_session(self.session_id)
        return self.session

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.session:
            self.profiler.end_session(self.session)


def profile_markup(
    markup: str,
    iterations: int = 10,
    config: Optional[MarkupTreeConfig] = None,
    enable_memory_tracking: bool = True
) -> PerformanceReport:
    """Profile parsing, live tree building and id assignment.

    Args:
        markup: Markup content to profile
        iterations: Number of profiled runs
        config: Optional configuration for the parser and live tree
        enable_memory_tracking: Whether to sample process RSS

    Returns:
        PerformanceReport with one session per iteration

    Raises:
        ValueError: If ``iterations`` is not positive
        MarkupParseError: If the markup is malformed
    """
    if iterations <= 0:
        raise ValueError("iterations must be positive")

    config = config or MarkupTreeConfig()
    profiler = PerformanceProfiler(enable_memory_tracking)
    parser = MarkupTreeParser(config)
    input_size = len(markup.encode("utf-8"))

    for iteration in range(iterations):
        with profiler.profile_parsing(f"iteration_{iteration}") as session:
            session.input_size = input_size

            with profiler.profile_stage(session, "parse") as stage:
                result = parser.parse(markup)
                result.raise_for_error()
                stage.operations_count = result.element_count

            live = LiveTree(config.tree)
            with profiler.profile_stage(session, "build") as stage:
                root = live.from_tree(result.tree)
                stage.operations_count = len(live)

            with profiler.profile_stage(session, "index") as stage:
                live.idx(root)
                stage.operations_count = len(live)

            session.metadata = {"iteration": iteration, "node_count": len(live)}

    return profiler.generate_report()
