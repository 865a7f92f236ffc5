"""Reference-counted datablocks and the managers that own them.

A datablock is any engine resource (object, mesh, texture, ...) whose lifetime
is managed by a :class:`DatablockManager`. Three kinds of handle exist:

* :class:`Ref` - a counted reference; while it is held the datablock stays
  registered with its manager.
* :class:`WeakRef` - an uncounted reference that turns null once the datablock
  has been collected, and can be elevated to a :class:`Ref`.
* the plain Python object returned by :meth:`Ref.get`.
"""

from __future__ import annotations

import itertools
import weakref
from typing import Any, ClassVar, Generic, Iterator, Optional, TypeVar

DATABLOCK_NULL = 0

T = TypeVar("T", bound="Datablock")


class DatablockError(Exception):
    """Raised on misuse of datablocks or their references."""


class Datablock:
    """Base class of every managed engine resource."""

    def __init__(self, datablock_id: int) -> None:
        self._datablock_id = datablock_id
        self._ref_count = 0
        self._deleted = False

    @property
    def id(self) -> int:
        """The identifier assigned by the owning manager."""
        return self._datablock_id

    @property
    def deleted(self) -> bool:
        """Whether the datablock has been removed from its manager."""
        return self._deleted

    def ref(self) -> "Ref[Any]":
        """Return a counted reference to this datablock."""
        if self._deleted:
            raise DatablockError(
                f"reference requested on deleted datablock {self._datablock_id}"
            )
        return Ref(self)

    def weak_ref(self) -> "WeakRef[Any]":
        """Return an uncounted reference, null if the datablock is deleted."""
        if self._deleted:
            return WeakRef()
        return WeakRef(self)


class Ref(Generic[T]):
    """A counted reference to a datablock; a null Ref is falsy."""

    __slots__ = ("_datablock",)

    def __init__(self, target: "Datablock | Ref[Any] | None" = None) -> None:
        if isinstance(target, Ref):
            target = target._datablock
        elif target is not None and not isinstance(target, Datablock):
            raise TypeError(f"cannot reference {type(target).__name__}")
        self._datablock: Optional[Datablock] = target
        if target is not None:
            target._ref_count += 1

    def get(self) -> Optional[T]:
        """Return the referenced datablock, or None for a null reference."""
        return self._datablock  # type: ignore[return-value]

    def cast(self, cls: type) -> "Ref[Any]":
        """Return a new reference checked against ``cls``."""
        if not isinstance(cls, type) or not issubclass(cls, Datablock):
            raise TypeError("cast target must be a Datablock subclass")
        if self._datablock is not None and not isinstance(self._datablock, cls):
            raise DatablockError(
                f"{type(self._datablock).__name__} is not a {cls.__name__}"
            )
        return Ref(self._datablock)

    def weak(self) -> "WeakRef[T]":
        """Return an uncounted reference to the same datablock."""
        return WeakRef(self._datablock)

    def release(self) -> None:
        """Drop this reference, turning it into a null reference."""
        datablock = self._datablock
        if datablock is not None:
            datablock._ref_count -= 1
            self._datablock = None

    def __bool__(self) -> bool:
        return self._datablock is not None

    def __eq__(self, other: object) -> bool:
        if other is None:
            return self._datablock is None
        if isinstance(other, Ref):
            return self._datablock is other._datablock
        return NotImplemented

    def __hash__(self) -> int:
        return id(self._datablock)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        datablock = self._datablock
        if datablock is None:
            raise AttributeError(f"null reference has no attribute {name!r}")
        return getattr(datablock, name)

    def __del__(self) -> None:
        try:
            self.release()
        except AttributeError:
            pass

    def __repr__(self) -> str:
        if self._datablock is None:
            return "Ref(None)"
        return f"Ref({type(self._datablock).__name__}#{self._datablock.id})"


class WeakRef(Generic[T]):
    """An uncounted reference that becomes null once its datablock is deleted."""

    __slots__ = ("_target",)

    def __init__(self, datablock: Optional[Datablock] = None) -> None:
        self._target = weakref.ref(datablock) if datablock is not None else None

    def _resolve(self) -> Optional[Datablock]:
        return None if self._target is None else self._target()

    def exists(self) -> bool:
        """Return whether the referenced datablock is still live."""
        datablock = self._resolve()
        return datablock is not None and not datablock._deleted

    def elevate(self) -> Ref[T]:
        """Return a counted reference, or a null Ref if the datablock is gone."""
        datablock = self._resolve()
        if datablock is None or datablock._deleted:
            return Ref()
        return Ref(datablock)

    def __bool__(self) -> bool:
        return self.exists()

    def __repr__(self) -> str:
        datablock = self._resolve()
        if datablock is None or datablock._deleted:
            return "WeakRef(None)"
        return f"WeakRef({type(datablock).__name__}#{datablock.id})"


class DatablockManager(Generic[T]):
    """Owns the datablocks of one base type and collects unused ones."""

    # Identifiers are unique per base type, across all managers of that type.
    _next_ids: ClassVar[dict[type, Iterator[int]]] = {}

    def __init__(self, base_type: type) -> None:
        if not isinstance(base_type, type) or not issubclass(base_type, Datablock):
            raise TypeError("DatablockManager can only manage Datablock subclasses")
        self.base_type = base_type
        self._datablocks: list[Ref[Any]] = []

    def _new_id(self) -> int:
        counter = self._next_ids.setdefault(
            self.base_type, itertools.count(DATABLOCK_NULL + 1)
        )
        return next(counter)

    def create(self, cls: Optional[type] = None, *args: Any, **kwargs: Any) -> Ref[Any]:
        """Construct a datablock of ``cls`` (default: the base type) and register it."""
        if cls is None:
            cls = self.base_type
        if not isinstance(cls, type) or not issubclass(cls, self.base_type):
            raise TypeError(
                f"{getattr(cls, '__name__', cls)!s} does not derive from "
                f"{self.base_type.__name__}"
            )
        datablock = cls(self._new_id(), *args, **kwargs)
        self._datablocks.append(Ref(datablock))
        return Ref(datablock)

    def get_by_id(self, datablock_id: int) -> Ref[Any]:
        """Return a reference to the datablock with this id, or a null Ref."""
        for held in self._datablocks:
            datablock = held.get()
            if datablock is not None and datablock.id == datablock_id:
                return Ref(datablock)
        return Ref()

    def garbage_collect(self) -> int:
        """Remove datablocks referenced only by this manager; return how many."""
        kept: list[Ref[Any]] = []
        removed = 0
        for held in self._datablocks:
            datablock = held.get()
            if datablock is None or datablock._ref_count <= 1:
                if datablock is not None:
                    datablock._deleted = True
                held.release()
                removed += 1
            else:
                kept.append(held)
        self._datablocks = kept
        return removed

    def __iter__(self) -> Iterator[Ref[Any]]:
        for held in tuple(self._datablocks):
            yield Ref(held)

    def __len__(self) -> int:
        return len(self._datablocks)