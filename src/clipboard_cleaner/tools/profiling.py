"""Performance profiling for sanitize runs.

Times each pipeline stage (charset resolution, decoding, display pass and
profile transformation) and tracks resident memory with psutil, so slow
profiles or pathological inputs can be spotted from the command line.
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil

from ..api.sanitizer import ClipboardSanitizer
from ..shared.logging import get_logger
from ..shared.result import SanitizeResult


@dataclass
class StagePerformance:
    """Performance metrics for one pipeline stage."""

    stage_name: str
    start_time: float
    end_time: float = 0.0
    memory_start: int = 0  # bytes
    memory_end: int = 0  # bytes
    characters: int = 0

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000

    @property
    def memory_delta(self) -> int:
        return self.memory_end - self.memory_start

    @property
    def chars_per_second(self) -> float:
        duration_s = self.end_time - self.start_time
        return self.characters / duration_s if duration_s > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage_name,
            "duration_ms": self.duration_ms,
            "memory_delta": self.memory_delta,
            "characters": self.characters,
            "chars_per_second": self.chars_per_second,
        }


@dataclass
class ProfilingSession:
    """All stage measurements of one sanitize run."""

    session_id: str
    start_time: float
    end_time: float = 0.0
    input_size: int = 0  # bytes
    stages: List[StagePerformance] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_duration_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000

    @property
    def throughput_mb_per_s(self) -> float:
        duration_s = self.end_time - self.start_time
        if duration_s <= 0:
            return 0.0
        return (self.input_size / (1024 * 1024)) / duration_s

    def stage(self, name: str) -> Optional[StagePerformance]:
        for stage in self.stages:
            if stage.stage_name == name:
                return stage
        return None

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
    """Summary over all recorded sessions."""

    sessions: List[ProfilingSession]
    generation_time: float

    @property
    def session_count(self) -> int:
        return len(self.sessions)

    @property
    def average_duration_ms(self) -> float:
        if not self.sessions:
            return 0.0
        return sum(s.total_duration_ms for s in self.sessions) / len(self.sessions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generation_time": self.generation_time,
            "summary": {
                "session_count": self.session_count,
                "average_duration_ms": self.average_duration_ms,
            },
            "sessions": [session.to_dict() for session in self.sessions],
        }

    def format_text(self) -> str:
        lines = [f"Profiled {self.session_count} run(s), "
                 f"average {self.average_duration_ms:.2f}ms"]
        for session in self.sessions:
            lines.append(f"{session.session_id}: {session.total_duration_ms:.2f}ms "
                         f"for {session.input_size} bytes")
            for stage in session.stages:
                lines.append(f"   {stage.stage_name:<10} {stage.duration_ms:8.3f}ms "
                             f"{stage.memory_delta:+d} bytes")
        return "\n".join(lines)


class StageProfiler:
    """Context manager measuring one stage of a session."""

    def __init__(
        self, profiler: "PerformanceProfiler", session: ProfilingSession, stage_name: str
    ) -> None:
        self.profiler = profiler
        self.session = session
        self.stage_name = stage_name
        self.stage: Optional[StagePerformance] = None

    def __enter__(self) -> StagePerformance:
        self.stage = StagePerformance(
            stage_name=self.stage_name,
            start_time=time.perf_counter(),
            memory_start=self.profiler.current_memory(),
        )
        return self.stage

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.stage is None:
            return
        self.stage.end_time = time.perf_counter()
        self.stage.memory_end = self.profiler.current_memory()
        self.session.stages.append(self.stage)


class PerformanceProfiler:
    """Records per-stage timings of sanitize runs.

    Examples:
        >>> profiler = PerformanceProfiler()
        >>> result = profiler.profile_sanitize(sanitizer, b"text", target="UTF8_STRING")
        >>> print(profiler.generate_report().format_text())
    """

    def __init__(self, enable_memory_tracking: bool = True) -> None:
        self.enable_memory_tracking = enable_memory_tracking
        self.sessions: List[ProfilingSession] = []
        self.logger = get_logger(__name__, None, "performance_profiler")
        self._process = psutil.Process() if enable_memory_tracking else None

    def current_memory(self) -> int:
        """Resident set size of this process in bytes (0 when tracking is off)."""
        if self._process is None:
            return 0
        return self._process.memory_info().rss

    def start_session(self, session_id: str, input_size: int = 0) -> ProfilingSession:
        session = ProfilingSession(
            session_id=session_id,
            start_time=time.perf_counter(),
            input_size=input_size,
        )
        self.logger.debug(
            "Started profiling session",
            extra={"session_id": session_id, "input_size": input_size},
        )
        return session

    def end_session(self, session: ProfilingSession) -> None:
        session.end_time = time.perf_counter()
        self.sessions.append(session)
        self.logger.debug(
            "Ended profiling session",
            extra={
                "session_id": session.session_id,
                "duration_ms": session.total_duration_ms,
            },
        )

    def profile_stage(self, session: ProfilingSession, stage_name: str) -> StageProfiler:
        return StageProfiler(self, session, stage_name)

    def profile_sanitize(
        self,
        sanitizer: ClipboardSanitizer,
        data: bytes,
        target: Optional[str] = None,
        encoding: Optional[str] = None,
        profile: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> SanitizeResult:
        """Run the sanitizer pipeline stage by stage, timing each stage.

        Calls the same stage methods as :meth:`ClipboardSanitizer.sanitize`,
        so the result is identical apart from its correlation ID.
        """
        session = self.start_session(
            session_id or f"run_{len(self.sessions) + 1}", input_size=len(data)
        )
        try:
            with self.profile_stage(session, "resolve"):
                result = sanitizer.start(target, encoding)
            session.metadata["correlation_id"] = result.correlation_id
            if result.charset is None:
                return result

            with self.profile_stage(session, "decode") as stage:
                decoded = sanitizer.decode_data(result, data)
                stage.characters = len(decoded or "")
            if decoded is None:
                return result

            with self.profile_stage(session, "display") as stage:
                display_text = sanitizer.display(result, decoded)
                stage.characters = len(decoded)

            with self.profile_stage(session, "transform") as stage:
                sanitizer.transform(result, display_text, profile)
                stage.characters = len(display_text)
            session.metadata.update({"charset": result.charset, "profile": result.profile})
            return result
        finally:
            self.end_session(session)

    def generate_report(self) -> PerformanceReport:
        return PerformanceReport(sessions=list(self.sessions), generation_time=time.time())

    def save_report(self, report: PerformanceReport, output_path: Path) -> None:
        output_path.write_text(json.dumps(report.to_dict(), indent=2))
        self.logger.info(
            "Saved performance report",
            extra={"output_path": str(output_path), "session_count": report.session_count},
        )

    def clear_sessions(self) -> None:
        self.sessions.clear()
