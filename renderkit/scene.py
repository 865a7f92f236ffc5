"""Scene objects arranged in a hierarchy, and the scenes that hold them."""

from __future__ import annotations

from typing import Any, Iterator, Optional, TypeVar, Union

import numpy as np

from .components import Component
from .datablock import Datablock, Ref, WeakRef
from .transform import Transform

C = TypeVar("C", bound=Component)

ObjectLike = Union["SceneObject", Ref, None]


def _unwrap(value: Any) -> Optional[Datablock]:
    if value is None:
        return None
    if isinstance(value, Ref):
        return value.get()
    if isinstance(value, Datablock):
        return value
    raise TypeError(f"expected a datablock or a Ref, got {type(value).__name__}")


class SceneObject(Datablock):
    """A node of a scene: a transform, ordered components and child objects.

    A parent holds counted references to its children; a child refers to its
    parent and its scene through weak references.
    """

    def __init__(self, datablock_id: int, engine: Any = None) -> None:
        super().__init__(datablock_id)
        self.engine = engine
        self.name = ""
        self.transform = Transform()
        self.components: list[Component] = []
        self._parent: WeakRef[Any] = WeakRef()
        self._children: list[Ref[Any]] = []
        self._scene: WeakRef[Any] = WeakRef()

    @property
    def type_name(self) -> str:
        return type(self).__name__

    @property
    def parent(self) -> Ref[Any]:
        """A reference to the parent object, null for a root or detached object."""
        return self._parent.elevate()

    @property
    def children(self) -> tuple[Ref[Any], ...]:
        return tuple(Ref(child) for child in self._children)

    @property
    def scene(self) -> Ref[Any]:
        """A reference to the scene this object belongs to, possibly null."""
        return self._scene.elevate()

    @scene.setter
    def scene(self, scene: Any) -> None:
        target = _unwrap(scene)
        weak = target.weak_ref() if target is not None else WeakRef()
        self._scene = weak
        for obj in self._descendants():
            obj._scene = weak

    @property
    def local_matrix(self) -> np.ndarray:
        return self.transform.matrix

    @local_matrix.setter
    def local_matrix(self, mat: Any) -> None:
        self.transform.from_matrix(mat)

    def _descendants(self) -> Iterator["SceneObject"]:
        for held in self._children:
            child = held.get()
            if child is not None:
                yield child
                yield from child._descendants()

    def set_parent(self, parent: ObjectLike) -> None:
        """Move this object below ``parent``; None detaches it.

        The object joins the scene of its new parent. Raises ValueError if the
        move would make the object its own ancestor.
        """
        target = _unwrap(parent)
        if target is not None:
            if not isinstance(target, SceneObject):
                raise TypeError("a parent must be a SceneObject")
            if target is self or any(d is target for d in self._descendants()):
                raise ValueError("an object cannot be parented to itself or a descendant")

        old = self._parent.elevate().get()
        if old is not None:
            for held in old._children:
                if held.get() is self:
                    held.release()
            old._children = [held for held in old._children if held]

        if target is None:
            self._parent = WeakRef()
            return
        target._children.append(Ref(self))
        self._parent = target.weak_ref()
        self.scene = target._scene.elevate()

    def add_component(self, component: C) -> C:
        """Append a component owned by this object; returns it."""
        if component.owner is not self:
            raise ValueError("the component belongs to another object")
        self.components.append(component)
        return component

    def get_component(self, cls: type[C]) -> Optional[C]:
        """Return the first component whose type is exactly ``cls``, or None."""
        for component in self.components:
            found = component.is_type(cls)
            if found is not None:
                return found
        return None

    def __repr__(self) -> str:
        return f"{self.type_name}({self.name!r}, id={self.id})"


class Scene(Datablock):
    """A hierarchy of objects below a plain root object, with an active camera."""

    def __init__(self, datablock_id: int, engine: Any = None) -> None:
        super().__init__(datablock_id)
        self.engine = engine
        self.lights: list[Any] = []
        self.background_color = np.zeros(3)
        self._active_camera: WeakRef[Any] = WeakRef()
        self.root: Ref[Any] = Ref()
        if engine is not None:
            self.root = engine.create_object(SceneObject)
            root = self.root.get()
            if root is not None:
                root.scene = self

    def add_object(self, obj: ObjectLike) -> bool:
        """Put an object without a parent, and everything below it, under the root.

        Returns False if there is no object or it already has a parent.
        """
        target = _unwrap(obj)
        if target is None or not isinstance(target, SceneObject) or target.parent:
            return False
        target.set_parent(self.root)
        target.scene = self
        return True

    @property
    def active_camera(self) -> Ref[Any]:
        """The camera used for the primary display; null once it is collected."""
        return self._active_camera.elevate()

    @active_camera.setter
    def active_camera(self, camera: ObjectLike) -> None:
        target = _unwrap(camera)
        self._active_camera = target.weak_ref() if target is not None else WeakRef()

    def evaluate_components(self, delta_time: float) -> None:
        """Evaluate every component, each object's before its children's."""
        root = self.root.get()
        if root is not None:
            self._evaluate(root, delta_time)

    def _evaluate(self, obj: SceneObject, delta_time: float) -> None:
        for component in tuple(obj.components):
            component.evaluate(delta_time)
        for child in obj.children:
            node = child.get()
            if node is not None:
                self._evaluate(node, delta_time)