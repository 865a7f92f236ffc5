"""Core of a small 3D render engine: datablocks, transforms, components, geometry, off-screen graphics and texture import."""

__version__ = "0.1.0"

__all__ = [
    "assets",
    "components",
    "controllers",
    "datablock",
    "depsgraph",
    "engine",
    "geometry",
    "graphics",
    "scene",
    "transform",
]