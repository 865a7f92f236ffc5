"""A minimal dependency graph dispatching standard engine events to hooks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeVar


@dataclass
class Event:
    """A node in the dependency graph; ``dirty`` marks a pending dispatch."""

    dirty: bool = False


@dataclass
class CursorMove(Event):
    """The cursor moved; ``pos`` is absolute, ``delta`` is the change since last time."""

    pos: tuple[float, float] = (0.0, 0.0)
    delta: tuple[float, float] = (0.0, 0.0)


@dataclass
class ResizeFramebuffer(Event):
    """The primary framebuffer was resized to ``width`` x ``height`` pixels."""

    width: int = 0
    height: int = 0


CursorHook = Callable[[CursorMove], None]
ResizeHook = Callable[[ResizeFramebuffer], None]
F = TypeVar("F", bound=Callable[..., None])


class Depsgraph:
    """Collects raw input events and dispatches them once per resolve."""

    def __init__(self) -> None:
        self.cursor_move = CursorMove()
        self.resize_framebuffer = ResizeFramebuffer()
        self._cursor_move_hooks: list[CursorHook] = []
        self._resize_hooks: list[ResizeHook] = []

    def invoke_cursor_move(self, x: float, y: float) -> None:
        """Record a new cursor position."""
        px, py = self.cursor_move.pos
        self.cursor_move.delta = (x - px, y - py)
        self.cursor_move.pos = (x, y)
        self.cursor_move.dirty = True

    def invoke_framebuffer_resize(self, width: int, height: int) -> None:
        """Record a new framebuffer size."""
        if width < 0 or height < 0:
            raise ValueError("framebuffer size cannot be negative")
        self.resize_framebuffer.width = width
        self.resize_framebuffer.height = height
        self.resize_framebuffer.dirty = True

    def hook_cursor_move(self, callback: F) -> F:
        """Register a callback for cursor motion; returns it for decorator use."""
        self._cursor_move_hooks.append(callback)
        return callback

    def hook_framebuffer_resize(self, callback: F) -> F:
        """Register a callback for framebuffer resizes; returns it for decorator use."""
        self._resize_hooks.append(callback)
        return callback

    def resolve_graph(self) -> None:
        """Dispatch every pending event to its hooks, in registration order."""
        if self.cursor_move.dirty:
            for hook in self._cursor_move_hooks:
                hook(self.cursor_move)
            self.cursor_move.dirty = False
        if self.resize_framebuffer.dirty:
            for hook in self._resize_hooks:
                hook(self.resize_framebuffer)
            self.resize_framebuffer.dirty = False