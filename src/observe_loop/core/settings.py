"""Runtime pipeline configuration models."""

from __future__ import annotations

from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass
from typing import Any, Mapping


DEFAULT_SORT_THRESHOLD = 16
DEFAULT_WRAP_THRESHOLD = 3_000_000
DEFAULT_SAMPLE_THRESHOLD = 64
DEFAULT_HISTORY_LIMIT = 0


@dataclass(frozen=True, slots=True)
class PipelineSettings:
    """Immutable pipeline thresholds parsed from TOML sources.

    ``wrap_threshold`` is expressed in microseconds and must exceed the
    normal gap between frames while staying well below a full timer
    rollover.  ``history_limit`` of ``0`` keeps the history unbounded.
    """

    sort_threshold: int = DEFAULT_SORT_THRESHOLD
    wrap_threshold: int = DEFAULT_WRAP_THRESHOLD
    sample_threshold: int = DEFAULT_SAMPLE_THRESHOLD
    history_limit: int = DEFAULT_HISTORY_LIMIT

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any] | None = None
    ) -> "PipelineSettings":
        """Coerce the ``[pipeline]`` table of a configuration mapping.

        Unknown or invalid values fall back to the defaults.
        """

        def _coerce_int(value: Any, fallback: int) -> int:
            if value is None or isinstance(value, bool):
                return fallback
            try:
                numeric = int(value)
            except (TypeError, ValueError):
                return fallback
            if numeric < 0:
                return fallback
            return numeric

        section = config.get("pipeline") if config else None
        pipeline_cfg: Mapping[str, Any] = (
            section if isinstance(section, ABCMapping) else {}
        )

        options = cls(
            sort_threshold=_coerce_int(
                pipeline_cfg.get("sort_threshold"), DEFAULT_SORT_THRESHOLD
            ),
            wrap_threshold=_coerce_int(
                pipeline_cfg.get("wrap_threshold"), DEFAULT_WRAP_THRESHOLD
            ),
            sample_threshold=_coerce_int(
                pipeline_cfg.get("sample_threshold"), DEFAULT_SAMPLE_THRESHOLD
            ),
            history_limit=_coerce_int(
                pipeline_cfg.get("history_limit"), DEFAULT_HISTORY_LIMIT
            ),
        )
        return options.with_defaults()

    def with_defaults(self) -> "PipelineSettings":
        """Return an instance with normalised field values."""

        sort = max(1, int(self.sort_threshold))
        sample = max(2, int(self.sample_threshold))
        limit = max(0, int(self.history_limit))
        if limit:
            limit = max(limit, sample, sort + 1)
        return PipelineSettings(
            sort_threshold=sort,
            wrap_threshold=max(0, int(self.wrap_threshold)),
            sample_threshold=sample,
            history_limit=limit,
        )

    def override(self, **values: Any) -> "PipelineSettings":
        """Return a copy with non-``None`` keyword values applied."""

        payload = {
            "sort_threshold": self.sort_threshold,
            "wrap_threshold": self.wrap_threshold,
            "sample_threshold": self.sample_threshold,
            "history_limit": self.history_limit,
        }
        for key, value in values.items():
            if key not in payload:
                raise TypeError(f"Unknown pipeline setting {key!r}")
            if value is not None:
                payload[key] = value
        return PipelineSettings(**payload).with_defaults()

    def as_dict(self) -> dict[str, int]:
        return {
            "sort_threshold": self.sort_threshold,
            "wrap_threshold": self.wrap_threshold,
            "sample_threshold": self.sample_threshold,
            "history_limit": self.history_limit,
        }


__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "DEFAULT_SAMPLE_THRESHOLD",
    "DEFAULT_SORT_THRESHOLD",
    "DEFAULT_WRAP_THRESHOLD",
    "PipelineSettings",
]
