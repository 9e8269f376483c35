"""Converter configuration."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class ConverterConfig:
    """Tunable knobs for the compiler, emitter and validator.

    Every public entry point accepts ``config=None`` and falls back to
    ``DEFAULT_CONFIG``.
    """

    rem_base_px: float = 16.0
    max_variable_depth: int = 5
    force_visible: bool = True
    max_repeat_tracks: int = 12
    auto_fit_container_px: int = 1024
    auto_fit_max_columns: int = 6
    embed_warn_bytes: int = 10 * 1024
    embed_error_bytes: int = 100 * 1024
    max_node_depth: int = 50
    id_prefix: str = "fb"
    embed_non_standard_css: bool = True

    def __post_init__(self) -> None:
        if self.rem_base_px <= 0:
            raise ValueError("rem_base_px must be positive")
        if self.max_variable_depth < 1:
            raise ValueError("max_variable_depth must be at least 1")
        if self.embed_warn_bytes > self.embed_error_bytes:
            raise ValueError("embed_warn_bytes cannot exceed embed_error_bytes")

    def with_overrides(self, **overrides: object) -> ConverterConfig:
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)  # type: ignore[arg-type]


DEFAULT_CONFIG = ConverterConfig()


def resolve_config(config: ConverterConfig | None) -> ConverterConfig:
    return config if config is not None else DEFAULT_CONFIG
