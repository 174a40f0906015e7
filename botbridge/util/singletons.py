"""Reset hooks for module-level singletons (settings, default stores)."""

from __future__ import annotations

from collections.abc import Callable

_reset_fns: list[Callable[[], None]] = []


def register_singleton(reset_fn: Callable[[], None]) -> None:
    """Register *reset_fn* so tests can rebuild the singleton it owns."""
    _reset_fns.append(reset_fn)


def reset_all_singletons() -> None:
    for fn in _reset_fns:
        fn()
