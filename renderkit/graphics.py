"""Graphics backends, GPU-side resource handles and textures.

The built-in backend renders off-screen: it keeps an in-memory framebuffer
and stores uploaded meshes and textures, so it runs anywhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, Union

import numpy as np

from .datablock import Datablock
from .geometry import MeshData, Rectangle, Sphere


class Backend(Enum):
    """Graphics backends, in order of preference after NONE."""

    NONE = "none"
    OPENGL = "opengl"
    HEADLESS = "headless"


class RenderPipeline(Protocol):
    """What a render pipeline provides to :class:`Graphics`."""

    def init(self) -> None: ...

    def render(self, scene: Any) -> None: ...

    def render_mesh(self, mesh: Any) -> None: ...

    def render_primitive(self, rect: Rectangle, material: Any) -> None: ...

    def resize_framebuffer(self, width: int, height: int) -> None: ...


PixelData = Union[bytes, bytearray, memoryview, np.ndarray]


def _as_pixels(data: PixelData, width: int, height: int, num_channels: int) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("texture dimensions must be positive")
    if not 1 <= num_channels <= 4:
        raise ValueError("textures have between 1 and 4 channels")
    if isinstance(data, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(bytes(data), dtype=np.uint8)
    else:
        arr = np.asarray(data, dtype=np.uint8)
    if arr.size != width * height * num_channels:
        raise ValueError("pixel data does not match the texture dimensions")
    return arr.reshape(height, width, num_channels).copy()


class Texture(Datablock):
    """An image datablock, optionally loaded from ``path``."""

    def __init__(self, datablock_id: int, path: Union[str, Path, None] = None) -> None:
        super().__init__(datablock_id)
        self.path: Optional[Path] = Path(path) if path is not None else None
        self.width = 0
        self.height = 0
        self.num_channels = 0
        self.data: Optional[np.ndarray] = None
        self.gpu: Optional[GPUTexture] = None

    def upload(self, data: PixelData, width: int, height: int, num_channels: int) -> None:
        """Store pixel data (row-major, interleaved channels) and send it to the GPU."""
        pixels = _as_pixels(data, width, height, num_channels)
        if self.gpu is not None:
            self.gpu.upload(pixels, width, height, num_channels)
        self.data = pixels
        self.width, self.height, self.num_channels = width, height, num_channels


class GPUMesh:
    """GPU-side copy of a mesh for the off-screen backend."""

    def __init__(self) -> None:
        self.mesh: Optional[MeshData] = None
        self.vertices = np.zeros((0, 3))
        self.indices = np.zeros(0, dtype=np.uint32)
        self.draw_calls = 0

    def upload_from(self, mesh: MeshData) -> bool:
        """Copy the mesh's vertex positions and indices; returns True on success."""
        self.mesh = mesh
        self.vertices = mesh.positions
        self.indices = np.array(mesh.indices, dtype=np.uint32)
        return True

    def draw(self) -> int:
        """Issue a draw; returns the number of indices drawn (0 if nothing uploaded)."""
        if self.mesh is None:
            return 0
        self.draw_calls += 1
        return int(self.indices.size)


class GPUTexture:
    """GPU-side copy of a texture for the off-screen backend."""

    def __init__(self, texture: Texture) -> None:
        self.texture = texture
        self.pixels: Optional[np.ndarray] = None
        self.allocations = 0

    def upload(self, data: PixelData, width: int, height: int, num_channels: int) -> bool:
        """Store pixels, reallocating storage when the dimensions change."""
        pixels = _as_pixels(data, width, height, num_channels)
        current = (self.texture.width, self.texture.height, self.texture.num_channels)
        if current != (width, height, num_channels):
            self.allocations += 1
        self.pixels = pixels
        return True


@dataclass
class Primitives:
    """Uploaded primitive meshes: the unit rectangle [0,1]^2 and the unit sphere."""

    rectangle: Optional[GPUMesh] = None
    sphere: Optional[GPUMesh] = None


class Graphics:
    """The graphics engine, here backed by an off-screen framebuffer."""

    DEFAULT_SIZE = (512, 512)

    def __init__(self, engine: Any = None) -> None:
        self.engine = engine
        self.backend = Backend.HEADLESS
        self.pipeline: Optional[RenderPipeline] = None
        self.primitives = Primitives()
        self.title = ""
        self.window_open = False
        self.should_close = False
        self.fullscreen = False
        self.screen_size = (1920, 1080)
        self.clear_color = (0, 0, 0)
        self.frames_presented = 0
        self.framebuffer = np.zeros((0, 0, 3), dtype=np.uint8)
        self._allocate_framebuffer(*self.DEFAULT_SIZE)

    def _allocate_framebuffer(self, width: int, height: int) -> None:
        self.framebuffer = np.empty((height, width, 3), dtype=np.uint8)
        self.framebuffer[...] = self.clear_color

    @property
    def width(self) -> int:
        return int(self.framebuffer.shape[1])

    @property
    def height(self) -> int:
        return int(self.framebuffer.shape[0])

    def backend_string(self) -> str:
        """Name of the backend in use."""
        return "Headless"

    def gpu_name_string(self) -> str:
        """Name of the graphics device in use."""
        return "None"

    def set_render_pipeline(self, pipeline: Optional[RenderPipeline]) -> None:
        """Replace the render pipeline and initialise the new one."""
        self.pipeline = pipeline
        if pipeline is not None:
            pipeline.init()

    def resize_framebuffer(self, width: int, height: int) -> None:
        """Resize the framebuffer and tell the pipeline."""
        if width < 0 or height < 0:
            raise ValueError("framebuffer size cannot be negative")
        self._allocate_framebuffer(width, height)
        if self.pipeline is not None:
            self.pipeline.resize_framebuffer(width, height)

    def create_mesh(self) -> GPUMesh:
        """Create an empty GPU mesh for this backend."""
        return GPUMesh()

    def create_texture(self, texture: Texture) -> GPUTexture:
        """Create a GPU texture bound to ``texture``."""
        gpu = GPUTexture(texture)
        texture.gpu = gpu
        return gpu

    def create_window(self, title: str, width: int, height: int, fullscreen: bool) -> bool:
        """Open the window; in fullscreen the size is that of the screen."""
        self.title = title
        self.fullscreen = fullscreen
        if fullscreen:
            width, height = self.screen_size
        self.window_open = True
        self.should_close = False
        self.resize_framebuffer(width, height)
        return True

    def destroy_window(self) -> None:
        """Hide the window; does nothing if none is open."""
        self.window_open = False

    def request_close(self) -> None:
        """Ask the main loop to end at the next :meth:`poll_events`."""
        self.should_close = True

    def poll_events(self) -> bool:
        """Return False once the main loop should end."""
        return not self.should_close

    def swap_buffers(self) -> None:
        """Present the finished frame."""
        self.frames_presented += 1

    def read_pixels(self) -> np.ndarray:
        """Return a copy of the framebuffer as a (height, width, 3) uint8 array."""
        return self.framebuffer.copy()

    def render(self, scene: Any) -> None:
        """Render ``scene`` with the current pipeline, if any."""
        if self.pipeline is not None:
            self.pipeline.render(scene)

    def render_mesh(self, mesh: Any) -> None:
        if self.pipeline is not None:
            self.pipeline.render_mesh(mesh)

    def render_primitive(self, rect: Rectangle, material: Any) -> None:
        if self.pipeline is not None:
            self.pipeline.render_primitive(rect, material)

    def init_primitives(self) -> None:
        """Build and upload the rectangle and sphere primitive meshes."""
        rectangle = self.create_mesh()
        rectangle.upload_from(Rectangle().to_mesh())
        sphere = self.create_mesh()
        sphere.upload_from(Sphere(1.0).to_mesh(24, 12))
        self.primitives = Primitives(rectangle=rectangle, sphere=sphere)


GraphicsFactory = Callable[[Any], Optional[Graphics]]

_BACKENDS: dict[Backend, GraphicsFactory] = {Backend.HEADLESS: Graphics}


def register_backend(backend: Backend, factory: Optional[GraphicsFactory]) -> None:
    """Register a factory ``factory(engine)`` for ``backend``; None unregisters it."""
    if backend is Backend.NONE:
        raise ValueError("cannot register the NONE backend")
    if factory is None:
        _BACKENDS.pop(backend, None)
    else:
        _BACKENDS[backend] = factory


def _preferred_backend() -> Backend:
    for backend in Backend:
        if backend is not Backend.NONE and backend in _BACKENDS:
            return backend
    return Backend.NONE


def open_graphics(engine: Any, backend: Backend = Backend.NONE) -> Optional[Graphics]:
    """Create graphics for ``backend`` (NONE picks the preferred one), or None."""
    if backend is Backend.NONE:
        backend = _preferred_backend()
    factory = _BACKENDS.get(backend)
    if factory is None:
        return None
    graphics = factory(engine)
    if graphics is not None:
        graphics.engine = engine
    return graphics