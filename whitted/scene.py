"""
Scene graph consumed by the renderer.

A Scene is filled in once (normally by the scene parser) and is only read
while rendering, so worker threads can share it without locking.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

from .vec3 import Color
from .camera import Camera, default_camera
from .materials import Material, DEFAULT_MATERIAL
from .shapes import Shape, ShapeList
from .lights import Light


@dataclass
class Scene:
    """Camera, materials, shapes, lights and frame parameters.

    Attributes:
        camera: Primary ray generator
        materials: Materials in declaration order
        shapes: Every primitive in the scene
        lights: Every light in the scene
        background: Radiance of rays that hit nothing
        ambient: Ambient light color, multiplied by each material's Ka
        max_depth: Maximum recursion depth for reflected/refracted rays
        exposure: Multiplier applied before gamma correction
        image_name: Output file name
        width, height: Output image size in pixels
        xsample, ysample: Supersampling grid per pixel
    """
    camera: Camera = field(default_factory=default_camera)
    materials: List[Material] = field(default_factory=lambda: [DEFAULT_MATERIAL])
    shapes: ShapeList = field(default_factory=ShapeList)
    lights: List[Light] = field(default_factory=list)
    background: Color = field(default_factory=lambda: Color(0, 0, 0))
    ambient: Color = field(default_factory=lambda: Color(0, 0, 0))
    max_depth: int = 5
    exposure: float = 1.0
    image_name: str = "output.png"
    width: int = 256
    height: int = 256
    xsample: int = 1
    ysample: int = 1

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def current_material(self) -> Material:
        """The most recently declared material."""
        return self.materials[-1]

    def add_material(self, material: Material) -> None:
        self.materials.append(material)

    def add_shape(self, shape: Shape) -> None:
        self.shapes.add(shape)

    def add_light(self, light: Light) -> None:
        self.lights.append(light)
