"""
Whitted - A Python Recursive Ray Tracer

Renders text scene descriptions with:
- Analytic sphere, plane and triangle intersection (plus triangle meshes)
- Point, spot and area lights with hard shadows
- Phong local illumination with ambient, diffuse and specular terms
- Recursive mirror reflection and refraction up to a depth limit
- Jittered supersampling and multi-threaded tile rendering
- Exposure and gamma tone mapping to 8-bit images
"""

__version__ = "0.1.0"
__author__ = "Whitted Team"

from .vec3 import Vec3, Point3, Color, reflect, refract
from .ray import Ray
from .camera import Camera
from .materials import Material, DEFAULT_MATERIAL
from .shapes import Shape, Sphere, Plane, Triangle, ShapeList, HitRecord
from .lights import Light, LightSample, PointLight, SpotLight, make_area_lights
from .scene import Scene
from .renderer import Renderer, RenderSettings
from .tonemapping import ExposureToneMapper, tone_map, to_8bit, flip_vertical
from .mesh_loader import Mesh, MeshError, MeshTypeError, OBJLoader, load_mesh, mesh_triangles
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
