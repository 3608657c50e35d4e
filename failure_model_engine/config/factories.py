"""Factory helpers for component creation with logging."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from failure_model_engine.utils.logging import get_logger

T = TypeVar("T")

log = get_logger(__name__, component="factory")


def _type_names(component: object) -> list[str]:
    parts = component if isinstance(component, tuple) else (component,)
    return [part.__class__.__name__ for part in parts]


class FactoryBase(Generic[T]):
    """Deferred construction of a named component (or tuple of components)."""

    def __init__(self, name: str, builder: Callable[[], T]) -> None:
        self.name = name
        self.builder = builder

    def create(self) -> T:
        component = self.builder()
        log.info(
            "Component loaded",
            extra={"types": _type_names(component), "backend": self.name},
        )
        return component
