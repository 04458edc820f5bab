"""In-process counters for the HTTP and stdio transports (one process only)."""

from __future__ import annotations

from collections import Counter, deque
from threading import Lock
from typing import Deque, Dict, Optional, Tuple

RECENT_DURATIONS = 100


class MetricsRecorder:
    def __init__(self, recent_limit: int = RECENT_DURATIONS) -> None:
        self._lock = Lock()
        self._requests = 0
        self._durations: Deque[Tuple[str, float]] = deque(maxlen=recent_limit)
        self._rpc_methods: Counter[str] = Counter()
        self._protocol_errors: Counter[int] = Counter()
        self._tool_outcomes: Dict[bool, Counter[str]] = {True: Counter(), False: Counter()}
        self._settings_changed: Counter[str] = Counter()

    def incr_request(self) -> None:
        with self._lock:
            self._requests += 1

    def record_duration(self, request_id: str, duration_ms: float) -> None:
        with self._lock:
            self._durations.append((request_id, duration_ms))

    def record_rpc(self, method: Optional[str], *, error_code: Optional[int] = None) -> None:
        """Count one dispatched message; ``method`` is None when the envelope was unusable."""
        with self._lock:
            self._rpc_methods[method or "<invalid>"] += 1
            if error_code is not None:
                self._protocol_errors[error_code] += 1

    def record_tool(self, tool: str, *, success: bool) -> None:
        with self._lock:
            self._tool_outcomes[success][tool] += 1

    def record_setting_change(self, option_name: str) -> None:
        with self._lock:
            self._settings_changed[option_name] += 1

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "requests": self._requests,
                "rpc_methods": dict(self._rpc_methods),
                "protocol_errors": {str(code): count for code, count in self._protocol_errors.items()},
                "tool_success": dict(self._tool_outcomes[True]),
                "tool_error": dict(self._tool_outcomes[False]),
                "settings_changed": dict(self._settings_changed),
                "recent_request_durations_ms": dict(self._durations),
            }

    def reset(self) -> None:
        with self._lock:
            self._requests = 0
            self._durations.clear()
            self._rpc_methods.clear()
            self._protocol_errors.clear()
            for counter in self._tool_outcomes.values():
                counter.clear()
            self._settings_changed.clear()


default_metrics = MetricsRecorder()
