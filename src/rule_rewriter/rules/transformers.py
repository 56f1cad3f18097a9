"""ValueTransformers: keyed pure functions from an old value to its new form.

A VALUE_TRANSFORM rule looks up its transformer by key (the rule's
``transformer`` field, or its ``old_path``).  Unknown keys fall back to the
identity function, so a missing registration never loses a value.

Transformers must be pure and must accept every representation a value can
arrive in: YAML gives native booleans, properties files give strings.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

__all__ = ["ValueTransformer", "ValueTransformers", "forward_headers_strategy"]

ValueTransformer = Callable[[Any], Any]


def _is_true(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def forward_headers_strategy(value: Any) -> str:
    """``server.use-forward-headers`` boolean -> forward-headers strategy name.

    ``true`` (native or the string ``"true"``) maps to ``"native"``; anything
    else maps to ``"none"``.
    """
    return "native" if _is_true(value) else "none"


def _identity(value: Any) -> Any:
    return value


_BUILTINS: dict[str, ValueTransformer] = {
    "server.use-forward-headers": forward_headers_strategy,
    "forward-headers-strategy": forward_headers_strategy,
}


class ValueTransformers:
    """Registry of value transformers.

    Each instance starts from a copy of the built-ins; registrations on one
    instance never leak into another.

    Example::
        transformers = ValueTransformers()
        transformers.register("spring.jpa.open-in-view", lambda v: str(v).lower())
        transformers.apply("server.use-forward-headers", "true")   # "native"
        transformers.apply("unregistered.key", 42)                  # 42
    """

    def __init__(self, extra: dict[str, ValueTransformer] | None = None) -> None:
        self._registry: dict[str, ValueTransformer] = dict(_BUILTINS)
        if extra:
            self._registry.update(extra)

    def register(self, key: str, transformer: ValueTransformer) -> None:
        if not callable(transformer):
            msg = f"transformer for {key!r} must be callable"
            raise TypeError(msg)
        self._registry[key] = transformer

    def get(self, key: str | None) -> ValueTransformer:
        if key is None:
            return _identity
        return self._registry.get(key, _identity)

    def apply(self, key: str | None, value: Any) -> Any:
        return self.get(key)(value)

    def __contains__(self, key: object) -> bool:
        return key in self._registry

    def __iter__(self) -> Iterator[str]:
        return iter(self._registry)
