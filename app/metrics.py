from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

# Most recent render latencies kept for the p95 figure.
LATENCY_WINDOW = 1000


@dataclass
class MetricsCollector:
    counters: Counter[str] = field(default_factory=Counter)
    latencies_ms: deque[int] = field(default_factory=lambda: deque(maxlen=LATENCY_WINDOW))
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def increment(self, name: str, value: int = 1) -> None:
        with self._lock:
            self.counters[name] += value

    def observe_latency(self, value_ms: int) -> None:
        with self._lock:
            self.latencies_ms.append(value_ms)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            counters = dict(self.counters)
            ordered = sorted(self.latencies_ms)
        p95 = 0
        if ordered:
            idx = int(0.95 * (len(ordered) - 1))
            p95 = ordered[idx]
        return {
            "rendered_total": counters.get("invoices_rendered_total", 0),
            "render_failures_total": counters.get("invoices_failed_total", 0),
            "pdf_total": counters.get("pdfs_generated_total", 0),
            "emails_sent_total": counters.get("emails_sent_total", 0),
            "email_failures_total": counters.get("emails_failed_total", 0),
            "render_latency_p95_ms": p95,
        }
