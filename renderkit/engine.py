"""The render engine: owns every datablock, the active scene and the main loop."""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

import numpy as np
from PIL import Image

from .datablock import Datablock, DatablockManager, Ref
from .depsgraph import Depsgraph
from .geometry import MeshData
from .graphics import Backend, Graphics, GPUMesh, Texture, open_graphics
from .scene import Scene, SceneObject

PathLike = Union[str, os.PathLike]


class _Mesh(Datablock):
    """Mesh data plus its GPU copy."""

    def __init__(self, datablock_id: int, engine: "RenderEngine") -> None:
        super().__init__(datablock_id)
        self.data = MeshData()
        graphics = engine.graphics
        self.gpu: Optional[GPUMesh] = graphics.create_mesh() if graphics else None

    def upload(self) -> bool:
        """Send the mesh data to the GPU; False without graphics."""
        if self.gpu is None:
            return False
        return self.gpu.upload_from(self.data)


def _same_path(a: Path, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return a.resolve() == b.resolve()


class RenderEngine:
    """Keeps the graphics, input state, depsgraph, datablocks and active scene."""

    # Pause before an evaluation run, letting the window settle.
    EVAL_WARMUP_SECONDS = 1.0

    def __init__(self, backend: Backend = Backend.NONE) -> None:
        self._window_title = ""
        self.pressed_keys: set[Any] = set()
        self.depsgraph = Depsgraph()
        self.scenes: DatablockManager[Any] = DatablockManager(Scene)
        self.objects: DatablockManager[Any] = DatablockManager(SceneObject)
        self.meshes: DatablockManager[Any] = DatablockManager(_Mesh)
        self.textures: DatablockManager[Any] = DatablockManager(Texture)
        self._active_scene: Ref[Any] = Ref()
        self.graphics: Optional[Graphics] = open_graphics(self, backend)
        if self.graphics is not None:
            self.graphics.init_primitives()

    def __enter__(self) -> "RenderEngine":
        return self

    def __exit__(self, *exc: Any) -> None:
        if self.graphics is not None:
            self.graphics.destroy_window()

    @property
    def input_context(self) -> Callable[[Any], bool]:
        """A callable telling whether a key is held."""
        return self.pressed_keys.__contains__

    @property
    def window_title(self) -> str:
        return self._window_title

    @window_title.setter
    def window_title(self, title: str) -> None:
        self._window_title = title
        if self.graphics is not None and self.graphics.window_open:
            self.graphics.title = title

    @property
    def active_scene(self) -> Ref[Any]:
        return Ref(self._active_scene)

    @active_scene.setter
    def active_scene(self, scene: Union[Scene, Ref, None]) -> None:
        if isinstance(scene, Ref):
            scene = scene.get()
        self._active_scene = Ref(scene)

    def _open_window(self, title: str, width: int, height: int, fullscreen: bool) -> None:
        assert self.graphics is not None
        self._window_title = title
        self.graphics.create_window(title, width, height, fullscreen)

    def launch(self, title: str, width: int, height: int, fullscreen: bool) -> None:
        """Run the main loop until the window asks to close."""
        graphics = self.graphics
        if graphics is None:
            return
        self._open_window(title, width, height, fullscreen)
        last = time.perf_counter()
        done = False
        while not done:
            now = time.perf_counter()
            delta_time, last = now - last, now
            self.depsgraph.resolve_graph()
            scene = self._active_scene.get()
            if scene is not None:
                scene.evaluate_components(delta_time)
            graphics.render(scene)
            done = not graphics.poll_events()
        graphics.destroy_window()

    def launch_eval(
        self,
        title: str,
        width: int,
        height: int,
        fullscreen: bool,
        camera_matrices: Iterable[Any],
        log: bool,
        render_dir: Optional[PathLike],
    ) -> Optional[list[float]]:
        """Render one frame per camera matrix.

        Frames are saved as numbered JPEG files in ``render_dir`` when it is
        given. Returns the frame times when ``log`` is true, otherwise None.
        """
        graphics = self.graphics
        if graphics is None:
            return None
        matrices = [np.asarray(m, dtype=float) for m in camera_matrices]
        self._open_window(title, width, height, fullscreen)

        scene = self._active_scene.get()
        if scene is not None:
            camera = scene.active_camera.get()
            if camera is not None and graphics.height:
                camera.aspect = graphics.width / graphics.height

        frame_times: list[float] = []
        out_dir = Path(render_dir) if render_dir else None
        if self.EVAL_WARMUP_SECONDS > 0:
            time.sleep(self.EVAL_WARMUP_SECONDS)

        last = time.perf_counter()
        for index, matrix in enumerate(matrices):
            now = time.perf_counter()
            delta_time, last = now - last, now
            if log:
                frame_times.append(delta_time)

            self.depsgraph.resolve_graph()
            if scene is not None:
                scene.evaluate_components(delta_time)
                camera = scene.active_camera.get()
                if camera is not None:
                    camera.transform.from_matrix(matrix)

            graphics.render(scene)

            if out_dir is not None:
                out_dir.mkdir(parents=True, exist_ok=True)
                # The framebuffer is stored bottom row first.
                pixels = np.ascontiguousarray(np.flipud(graphics.read_pixels()))
                Image.fromarray(pixels, "RGB").save(
                    (out_dir / f"{index:05d}.jpg").absolute(), "JPEG", quality=80
                )

            if not graphics.poll_events():
                break

        graphics.destroy_window()
        return frame_times if log else None

    def create_scene(self) -> Ref[Any]:
        """Create a new empty scene."""
        return self.scenes.create(Scene, self)

    def create_object(self, cls: type = SceneObject, *args: Any) -> Ref[Any]:
        """Create an object of ``cls`` named after its type and id."""
        ref = self.objects.create(cls, self, *args)
        obj = ref.get()
        if obj is not None:
            obj.name = f"{obj.type_name}.{obj.id}"
        return ref

    def get_object_by_id(self, object_id: int) -> Ref[Any]:
        """Return the object with this id, or a null Ref."""
        return self.objects.get_by_id(object_id)

    def create_mesh(self) -> Ref[Any]:
        """Create an empty mesh datablock."""
        return self.meshes.create(_Mesh, self)

    def create_texture(self, path: Optional[PathLike] = None) -> Ref[Any]:
        """Create an empty texture, bound to the GPU when graphics exist."""
        ref = self.textures.create(Texture, path)
        if self.graphics is not None:
            self.graphics.create_texture(ref.get())
        return ref

    def get_texture_by_path(self, path: PathLike) -> Ref[Any]:
        """Return the texture loaded from the same file as ``path``, or a null Ref."""
        target = Path(path)
        for ref in self.textures:
            texture = ref.get()
            if texture is not None and texture.path is not None and _same_path(
                texture.path, target
            ):
                return ref
        return Ref()