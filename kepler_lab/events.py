#!/usr/bin/env python3
"""
Minimal observer helper.

Models own Emitters and call emit() after they change; listeners are plain
callables registered with add_listener(). Nothing in the physics code depends
on this module: the engine mutates plain state and the owning model decides
when to notify.
"""
from typing import Callable, List


class Emitter:
    """Ordered list of callbacks invoked with the arguments passed to emit()."""

    def __init__(self, name: str = "emitter"):
        self.name = name
        self._listeners: List[Callable] = []

    def add_listener(self, listener: Callable) -> None:
        if listener in self._listeners:
            raise ValueError(f"listener already registered on {self.name}")
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable) -> None:
        self._listeners.remove(listener)

    def has_listener(self, listener: Callable) -> bool:
        return listener in self._listeners

    def emit(self, *args) -> None:
        # Copy so listeners may unregister themselves while being notified
        for listener in list(self._listeners):
            listener(*args)

    def __len__(self) -> int:
        return len(self._listeners)
