# renderkit

renderkit is the core of a small 3D render engine. It is a library and has no command-line interface. It provides:

- **Datablocks** (`renderkit.datablock`). Engine resources have ids and reference counts. A `DatablockManager` creates them and hands out `Ref` handles (counted) and `WeakRef` handles (uncounted). `garbage_collect()` deletes every datablock that only the manager still refers to, and returns how many it removed.
- **Dependency graph** (`renderkit.depsgraph`). `Depsgraph` records `CursorMove` and `ResizeFramebuffer` events. It passes them to the callbacks registered with `hook_cursor_move` and `hook_framebuffer_resize` when `resolve_graph()` is called.
- **Transforms** (`renderkit.transform`). `Transform` holds a position, a yaw/pitch/roll rotation and a scale, and caches the resulting 4×4 `matrix`. It can decompose a matrix again with `from_matrix`. `vector_apply_yaw` and `vector_apply_yaw_pitch` give first-person movement offsets. The helpers `yaw_pitch_roll` and `extract_euler_angle_yxz` are also available.
- **Components** (`renderkit.components`, `renderkit.controllers`). These are behaviours that run once per frame:
  - `Motion` stores a velocity and an angular velocity.
  - `ApplyMotion` moves its object by the motion for the current frame.
  - `KeyboardController` sets the velocities from WASD, Shift, Space and the arrow keys (`Key`).
  - `MouseRotation` turns the object from cursor events.
- **Geometry** (`renderkit.geometry`). `Rectangle`, `Ellipsoid` and `Sphere` build `MeshData`, which is a list of `Vertex` entries plus triangle indices. An invalid ellipsoid or sphere mesh request raises `GeometryError`.
- **Graphics** (`renderkit.graphics`). `Graphics` is the built-in off-screen backend, registered as `Backend.HEADLESS`. It keeps an in-memory framebuffer (`read_pixels()`) and records uploads through `GPUMesh` and `GPUTexture`. Further backends can be added with `register_backend`. `open_graphics` picks one.
- **Scenes** (`renderkit.scene`). A `Scene` holds a tree of `SceneObject`s below its root. Each object has a `Transform` and an ordered list of components.
- **Engine** (`renderkit.engine`). `RenderEngine` owns the datablock managers, the depsgraph, the set of pressed keys and the active scene. It runs the frame loop with `launch` or `launch_eval`.
- **Assets** (`renderkit.assets`). `import_texture` loads an image file with Pillow into a `Texture`. If a texture from the same file is already loaded, it reuses that one. Unreadable files raise `AssetError`.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install .[test]
pytest
```

## Example: a sphere mesh

```python
from renderkit.geometry import Sphere

mesh = Sphere(2.0).to_mesh(segments=24, rings=12)
print(len(mesh.vertices), len(mesh.indices))   # 266 1584
```

## Example: transforms

```python
import numpy as np
from renderkit.transform import Transform

t = Transform()
t.position = [1.0, 2.0, 3.0]
t.delta_rotation([0.5, 0.0, 0.0])
print(t.matrix)                                # a property, not a method
print(t.vector_apply_yaw(np.array([0.0, 0.0, -1.0])))
```

## Example: datablocks

```python
from renderkit.datablock import Datablock, DatablockManager

manager = DatablockManager(Datablock)
ref = manager.create(Datablock)
weak = ref.weak()
ref.release()
manager.garbage_collect()
assert not weak.exists()
```

## Example: a keyboard-driven object

```python
from renderkit.components import ApplyMotion, Motion
from renderkit.controllers import Key, KeyboardController
from renderkit.engine import RenderEngine

engine = RenderEngine()               # opens the headless backend
scene = engine.create_scene().get()
engine.active_scene = scene

player = engine.create_object().get()
motion = player.add_component(Motion(player))
player.add_component(KeyboardController(player, engine.input_context, motion))
player.add_component(ApplyMotion(player, motion))
scene.add_object(player)

engine.pressed_keys.add(Key.W)
scene.evaluate_components(0.5)
print(player.transform.position)      # [ 0.   0.  -1.5]
```

## Frame loops

`RenderEngine.launch(title, width, height, fullscreen)` repeats the following steps until `Graphics.poll_events()` returns `False`:

1. Resolve the depsgraph.
2. Evaluate the active scene's components.
3. Render.

With the built-in backend, the loop only ends after `engine.graphics.request_close()` has been called.

`RenderEngine.launch_eval(...)` renders one frame per camera matrix. Before rendering it pauses for `EVAL_WARMUP_SECONDS`, which is one second by default. It applies each matrix to the active camera, if the scene has one. When `render_dir` is given, it saves each frame as `00000.jpg`, `00001.jpg`, … and so on. It returns the list of frame times when `log` is true, and `None` otherwise.

## What the package does not do

- It opens no on-screen window and has no OpenGL or other GPU backend. The built-in backend draws off-screen only.
- It ships no render pipeline. `Graphics.render` does nothing until a pipeline object is set with `set_render_pipeline`, so saved frames show only the clear colour.
- It does not import 3D models. Only image textures can be imported.
- It has no lights, cameras or materials of its own. The active camera can be any `SceneObject`.