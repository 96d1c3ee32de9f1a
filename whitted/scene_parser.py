"""
Scene description language parser.

The scene language is a whitespace-delimited token stream with
case-insensitive keywords. A token starting with ``#`` comments out the
rest of its line. Each ``shape`` uses the most recently declared
``material``.

Example scene file::

    # three spheres on a floor
    image spheres.png 320 240 1.0
    camera 0 1 5  0 0 0  0 1 0  45
    background 0.1 0.1 0.2
    ambient 0.2 0.2 0.2
    maxdepth 5
    samples 2 2

    light point 5 5 5  1 1 1
    light spot 0 6 0  0 0 0  8 30  1 1 1
    light area -1 4 -1  2 0 0  0 0 2  4 4  1 1 1

    material diffuse 0.2 0.2 0.2  0.6 0.6 0.6
    shape plane 0 -1 0  0 1 0

    material specular 0.1 0 0  0.7 0 0  0.5 0.5 0.5  50
    shape sphere 0 0 0  1

    material glass 0.1 0.1 0.1  0.9 0.9 0.9  1.5
    shape triangle  -2 0 -2  -1 0 -2  -1.5 1 -2
    shape trimesh bunny.obj

Unknown keywords and sub-types are logged and skipped. Malformed numbers
and truncated directives raise SceneParseError.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from .vec3 import Vec3, Color
from .camera import Camera
from .materials import Material
from .shapes import Sphere, Plane, Triangle
from .lights import PointLight, SpotLight, make_area_lights
from .mesh_loader import MeshError, MeshTypeError, load_mesh, mesh_triangles
from .scene import Scene

logger = logging.getLogger(__name__)


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


def tokenize(text: str) -> List[Tuple[str, int]]:
    """Split scene text into (token, line number) pairs, dropping comments."""
    tokens = []
    for line_no, line in enumerate(text.splitlines(), 1):
        for token in line.split():
            if token.startswith('#'):
                break
            tokens.append((token, line_no))
    return tokens


class SceneParser:
    """Parser for scene description files."""

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        """Create a parser.

        Args:
            base_dir: Directory used to resolve relative trimesh paths
        """
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.scene = Scene()
        self._tokens: List[Tuple[str, int]] = []
        self._pos = 0

    def parse_file(self, filepath: Union[str, Path]) -> Scene:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file

        Returns:
            The populated Scene

        Raises:
            OSError: If the file cannot be read
            SceneParseError: If the content is malformed
        """
        path = Path(filepath)
        try:
            text = path.read_text(encoding='utf-8')
        except UnicodeDecodeError as e:
            raise SceneParseError(f"{path} is not a text file: {e}") from e
        if self.base_dir is None:
            self.base_dir = path.parent
        return self.parse_text(text)

    def parse_text(self, text: str) -> Scene:
        """Parse scene text into a Scene."""
        self._tokens = tokenize(text)
        self._pos = 0

        directives = {
            'image': self._parse_image,
            'camera': self._parse_camera,
            'background': self._parse_background,
            'ambient': self._parse_ambient,
            'maxdepth': self._parse_maxdepth,
            'samples': self._parse_samples,
            'light': self._parse_light,
            'material': self._parse_material,
            'shape': self._parse_shape,
        }

        while self._pos < len(self._tokens):
            keyword, line_no = self._next()
            handler = directives.get(keyword.lower())
            if handler is None:
                logger.warning("undefined keyword: %s (line %d)", keyword, line_no)
                continue
            handler()

        return self.scene

    # ------------------------------------------------------------------
    # Token helpers

    def _next(self) -> Tuple[str, int]:
        if self._pos >= len(self._tokens):
            last_line = self._tokens[-1][1] if self._tokens else 0
            raise SceneParseError(f"line {last_line}: unexpected end of scene")
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def _number(self, kind: Callable, kind_name: str):
        token, line_no = self._next()
        try:
            return kind(token)
        except ValueError:
            raise SceneParseError(
                f"line {line_no}: expected {kind_name}, got '{token}'"
            ) from None

    def _float(self) -> float:
        return self._number(float, "a number")

    def _int(self) -> int:
        return self._number(int, "an integer")

    def _vec3(self) -> Vec3:
        return Vec3(self._float(), self._float(), self._float())

    def _color(self) -> Color:
        return Color(self._float(), self._float(), self._float())

    # ------------------------------------------------------------------
    # Top-level directives

    def _parse_image(self) -> None:
        name, line_no = self._next()
        width = self._int()
        height = self._int()
        if width < 1 or height < 1:
            raise SceneParseError(f"line {line_no}: image size must be positive, got {width}x{height}")
        self.scene.image_name = name
        self.scene.width = width
        self.scene.height = height
        self.scene.exposure = self._float()

    def _parse_camera(self) -> None:
        eye = self._vec3()
        at = self._vec3()
        up = self._vec3()
        fovy = self._float()
        self.scene.camera = Camera(eye, at, up, fovy, self.scene.aspect_ratio)

    def _parse_background(self) -> None:
        self.scene.background = self._color()

    def _parse_ambient(self) -> None:
        self.scene.ambient = self._color()

    def _parse_maxdepth(self) -> None:
        self.scene.max_depth = self._int()

    def _parse_samples(self) -> None:
        self.scene.xsample = max(self._int(), 1)
        self.scene.ysample = max(self._int(), 1)

    def _parse_light(self) -> None:
        light_type, line_no = self._next()
        light_type = light_type.lower()

        if light_type == 'point':
            position = self._vec3()
            intensity = self._color()
            self.scene.add_light(PointLight(position, intensity))

        elif light_type == 'spot':
            apex = self._vec3()
            target = self._vec3()
            exponent = self._float()
            cutoff = self._float()
            intensity = self._color()
            self.scene.add_light(SpotLight(apex, target, exponent, cutoff, intensity))

        elif light_type == 'area':
            corner = self._vec3()
            edge1 = self._vec3()
            edge2 = self._vec3()
            nu = self._int()
            nv = self._int()
            intensity = self._color()
            for light in make_area_lights(corner, edge1, edge2, nu, nv, intensity):
                self.scene.add_light(light)

        else:
            logger.warning("undefined light type: %s (line %d)", light_type, line_no)

    def _parse_material(self) -> None:
        mat_type, line_no = self._next()
        mat_type = mat_type.lower()

        if mat_type == 'diffuse':
            ka = self._color()
            kd = self._color()
            self.scene.add_material(Material.make_diffuse(ka, kd))

        elif mat_type == 'specular':
            ka = self._color()
            kd = self._color()
            ks = self._color()
            phong_exp = self._float()
            self.scene.add_material(Material.make_specular(ka, kd, ks, phong_exp))

        elif mat_type == 'mirror':
            kr = self._color()
            self.scene.add_material(Material.make_mirror(kr))

        elif mat_type == 'glass':
            kr = self._color()
            kt = self._color()
            ior = self._float()
            self.scene.add_material(Material.make_glass(kr, kt, ior))

        elif mat_type == 'super':
            ka = self._color()
            kd = self._color()
            ks = self._color()
            phong_exp = self._float()
            kr = self._color()
            kt = self._color()
            ior = self._float()
            self.scene.add_material(Material.make_super(ka, kd, ks, phong_exp, kr, kt, ior))

        else:
            logger.warning("undefined material type: %s (line %d)", mat_type, line_no)

    def _parse_shape(self) -> None:
        shape_type, line_no = self._next()
        shape_type = shape_type.lower()
        material = self.scene.current_material

        if shape_type == 'plane':
            point = self._vec3()
            normal = self._vec3()
            self.scene.add_shape(Plane(point, normal, material))

        elif shape_type == 'sphere':
            center = self._vec3()
            radius = self._float()
            self.scene.add_shape(Sphere(center, radius, material))

        elif shape_type == 'triangle':
            p0, p1, p2 = self._vec3(), self._vec3(), self._vec3()
            self.scene.add_shape(Triangle(p0, p1, p2, material=material))

        elif shape_type == 'triangle_n':
            p0, p1, p2 = self._vec3(), self._vec3(), self._vec3()
            n0, n1, n2 = self._vec3(), self._vec3(), self._vec3()
            self.scene.add_shape(Triangle(p0, p1, p2, n0, n1, n2, material=material))

        elif shape_type == 'trimesh':
            filename, _ = self._next()
            self._parse_trimesh(filename, material, line_no)

        else:
            logger.warning("undefined shape type: %s (line %d)", shape_type, line_no)

    def _parse_trimesh(self, filename: str, material: Material, line_no: int) -> None:
        path = self._resolve(filename)
        try:
            mesh = load_mesh(str(path))
        except (OSError, MeshError) as e:
            raise SceneParseError(f"line {line_no}: cannot load trimesh {filename}: {e}") from e

        try:
            triangles = mesh_triangles(mesh, material)
        except MeshTypeError as e:
            logger.warning("%s (line %d)", e, line_no)
            return

        self.scene.shapes.extend(triangles)
        logger.info("Loaded trimesh %s: %d triangles", filename, len(triangles))

    def _resolve(self, filename: str) -> Path:
        path = Path(filename)
        if not path.is_absolute() and self.base_dir is not None:
            candidate = self.base_dir / path
            if candidate.exists():
                return candidate
        return path


def load_scene(filepath: Union[str, Path]) -> Scene:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        The populated Scene
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(text: str, base_dir: Optional[Union[str, Path]] = None) -> Scene:
    """Convenience function to parse a scene from text.

    Args:
        text: Scene description
        base_dir: Directory used to resolve relative trimesh paths

    Returns:
        The populated Scene
    """
    parser = SceneParser(base_dir)
    return parser.parse_text(text)
