"""In-process counter registry rendered in the Prometheus text format."""

from __future__ import annotations

from threading import Lock
from typing import Mapping, Sequence


def _format_labels(names: Sequence[str], values: Sequence[str]) -> str:
    if not names:
        return ""

    pairs = []
    for name, value in zip(names, values, strict=False):
        escaped = value.replace("\\", r"\\").replace("\n", r"\n").replace('"', r"\"")
        pairs.append(f'{name}="{escaped}"')
    return "{" + ",".join(pairs) + "}"


class CounterMetric:
    """Monotonic counter keyed by a fixed set of label names."""

    metric_type = "counter"

    def __init__(self, *, name: str, description: str, label_names: Sequence[str]) -> None:
        self.name = name
        self.description = description
        self.label_names = tuple(label_names)
        self._samples: dict[tuple[str, ...], int] = {}
        self._lock = Lock()

    def _normalize_labels(self, provided: Mapping[str, object]) -> tuple[str, ...]:
        if set(provided) != set(self.label_names):
            expected = ", ".join(self.label_names) or "<none>"
            received = ", ".join(sorted(provided)) or "<none>"
            raise ValueError(
                f"Metric '{self.name}' expected labels [{expected}] but received [{received}]"
            )
        return tuple(str(provided[label]) for label in self.label_names)

    def inc(self, *, amount: int = 1, **labels: object) -> None:
        if amount < 0:
            raise ValueError("Counters cannot be incremented by negative values")
        key = self._normalize_labels(labels)
        with self._lock:
            self._samples[key] = self._samples.get(key, 0) + amount

    def value(self, **labels: object) -> int:
        key = self._normalize_labels(labels)
        with self._lock:
            return self._samples.get(key, 0)

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()

    def render(self) -> list[str]:
        lines = [f"# HELP {self.name} {self.description}", f"# TYPE {self.name} {self.metric_type}"]
        with self._lock:
            samples = sorted(self._samples.items())
        if not samples:
            # Prometheus expects at least one sample; expose zero value without labels.
            lines.append(f"{self.name} 0")
            return lines
        for labels, value in samples:
            lines.append(f"{self.name}{_format_labels(self.label_names, labels)} {value}")
        return lines


class MetricsRegistry:
    """Collection of named counters."""

    def __init__(self) -> None:
        self._metrics: dict[str, CounterMetric] = {}
        self._lock = Lock()

    def counter(self, name: str, description: str, *, label_names: Sequence[str] = ()) -> CounterMetric:
        metric = CounterMetric(name=name, description=description, label_names=label_names)
        with self._lock:
            if name in self._metrics:
                raise ValueError(f"Metric '{name}' already registered")
            self._metrics[name] = metric
        return metric

    def render(self) -> str:
        lines: list[str] = []
        for name in sorted(self._metrics):
            lines.extend(self._metrics[name].render())
        return "\n".join(lines) + "\n"


# Shared registry instance used across the backend.
registry = MetricsRegistry()
