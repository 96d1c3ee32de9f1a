"""
Triangle mesh loader for the `trimesh` shape directive.

Supports two file formats:
- Wavefront OBJ (`.obj`): vertices (v), normals (vn) and faces (f) with
  fan triangulation of polygons
- Plain token meshes: ``<type> <nverts> <nfaces>`` followed by the vertex
  coordinates, the face indices (three per face, 0-based) and, for the
  ``triangle_n`` type, one normal per vertex

A loaded mesh keeps the raw vertex/face/normal arrays; `mesh_triangles`
expands them into Triangle primitives.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, List, Tuple
from dataclasses import dataclass, field

from .vec3 import Vec3, Point3
from .shapes import Triangle
from .materials import Material

logger = logging.getLogger(__name__)

MESH_TYPES = ('triangle', 'triangle_n')


class MeshError(Exception):
    """Error reading a mesh file."""
    pass


class MeshTypeError(MeshError):
    """A mesh declares a face type the renderer does not understand."""
    pass


@dataclass
class OBJVertex:
    """A face corner with optional normal index."""
    position_idx: int
    normal_idx: Optional[int] = None


@dataclass
class Mesh:
    """Indexed triangle mesh.

    Attributes:
        type: 'triangle' (flat faces) or 'triangle_n' (per-vertex normals)
        vertices: Vertex positions
        faces: Triangles as index triples into vertices
        normals: Per-vertex normals, parallel to vertices when type is
            'triangle_n'
    """
    type: str
    vertices: List[Point3] = field(default_factory=list)
    faces: List[Tuple[int, int, int]] = field(default_factory=list)
    normals: List[Vec3] = field(default_factory=list)


def mesh_triangles(mesh: Mesh, material: Material) -> List[Triangle]:
    """Expand a mesh into Triangle primitives sharing one material.

    Raises:
        MeshTypeError: If the mesh type is unknown
    """
    if mesh.type == 'triangle':
        return [
            Triangle(mesh.vertices[i0], mesh.vertices[i1], mesh.vertices[i2], material=material)
            for i0, i1, i2 in mesh.faces
        ]
    if mesh.type == 'triangle_n':
        return [
            Triangle(
                mesh.vertices[i0], mesh.vertices[i1], mesh.vertices[i2],
                mesh.normals[i0], mesh.normals[i1], mesh.normals[i2],
                material=material
            )
            for i0, i1, i2 in mesh.faces
        ]
    raise MeshTypeError(f"undefined trimesh type: {mesh.type}")


class OBJLoader:
    """Loader for Wavefront OBJ files."""

    def __init__(self):
        self.vertices: List[Point3] = []
        self.normals: List[Vec3] = []

    def load(self, filename: str) -> Mesh:
        """Load an OBJ file into an indexed mesh.

        The mesh is 'triangle_n' when every face corner references a
        normal; normals are then re-indexed per vertex position.

        Args:
            filename: Path to the OBJ file

        Returns:
            Mesh with triangulated faces
        """
        path = Path(filename)
        if not path.exists():
            raise FileNotFoundError(f"OBJ file not found: {filename}")

        self.vertices = []
        self.normals = []
        faces: List[List[OBJVertex]] = []

        with open(path, 'r') as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()

                # Skip empty lines and comments
                if not line or line.startswith('#'):
                    continue

                parts = line.split()
                cmd = parts[0]

                try:
                    if cmd == 'v':
                        x, y, z = float(parts[1]), float(parts[2]), float(parts[3])
                        self.vertices.append(Point3(x, y, z))

                    elif cmd == 'vn':
                        nx, ny, nz = float(parts[1]), float(parts[2]), float(parts[3])
                        self.normals.append(Vec3(nx, ny, nz).normalize())

                    elif cmd == 'f':
                        faces.extend(self._triangulate_face(self._parse_face(parts[1:])))

                except MeshError as e:
                    raise MeshError(f"{filename}:{line_num}: {e}") from e
                except (ValueError, IndexError):
                    logger.warning("Skipping malformed OBJ line %d in %s: %s", line_num, filename, line)
                    continue

        self._check_indices(filename, faces)

        smooth = bool(faces) and all(
            corner.normal_idx is not None for face in faces for corner in face
        )

        mesh = Mesh(type='triangle_n' if smooth else 'triangle', vertices=self.vertices)
        if smooth:
            vertex_normals: List[Optional[Vec3]] = [None] * len(self.vertices)
            for face in faces:
                for corner in face:
                    vertex_normals[corner.position_idx] = self.normals[corner.normal_idx]
            mesh.normals = [n if n is not None else Vec3(0, 0, 0) for n in vertex_normals]

        mesh.faces = [tuple(corner.position_idx for corner in face) for face in faces]
        return mesh

    def _parse_face(self, face_parts: List[str]) -> List[OBJVertex]:
        """Parse face vertex indices (handles v, v/vt, v/vt/vn, v//vn formats)."""
        vertices = []

        for part in face_parts:
            indices = part.split('/')

            # Position index (required, 1-indexed)
            pos_idx = self._zero_based(int(indices[0]), len(self.vertices))

            norm_idx = None
            if len(indices) > 2 and indices[2]:
                norm_idx = self._zero_based(int(indices[2]), len(self.normals))

            vertices.append(OBJVertex(pos_idx, norm_idx))

        return vertices

    @staticmethod
    def _zero_based(index: int, count: int) -> int:
        """Convert a 1-based (or negative, relative) OBJ index to 0-based."""
        if index == 0:
            raise MeshError("OBJ indices start at 1, got 0")
        if index < 0:
            return count + index
        return index - 1

    def _check_indices(self, filename: str, faces: List[List[OBJVertex]]) -> None:
        """Faces may reference vertices declared later, so check once at the end."""
        for face in faces:
            for corner in face:
                if not 0 <= corner.position_idx < len(self.vertices):
                    raise MeshError(
                        f"{filename}: vertex index {corner.position_idx + 1} out of range "
                        f"({len(self.vertices)} vertices)"
                    )
                if corner.normal_idx is not None and not 0 <= corner.normal_idx < len(self.normals):
                    raise MeshError(
                        f"{filename}: normal index {corner.normal_idx + 1} out of range "
                        f"({len(self.normals)} normals)"
                    )

    @staticmethod
    def _triangulate_face(face_verts: List[OBJVertex]) -> List[List[OBJVertex]]:
        """Fan triangulation for convex polygons: v0, v1, v2 then v0, v2, v3 etc."""
        return [
            [face_verts[0], face_verts[i], face_verts[i + 1]]
            for i in range(1, len(face_verts) - 1)
        ]


def _load_token_mesh(path: Path) -> Mesh:
    tokens = path.read_text().split()
    pos = 0

    def take(count: int, kind):
        nonlocal pos
        if pos + count > len(tokens):
            raise MeshError(f"{path}: unexpected end of mesh data")
        try:
            values = [kind(tok) for tok in tokens[pos:pos + count]]
        except ValueError as e:
            raise MeshError(f"{path}: malformed number: {e}") from e
        pos += count
        return values

    if not tokens:
        raise MeshError(f"{path}: empty mesh file")
    mesh_type = tokens[0].lower()
    pos = 1
    nverts, nfaces = take(2, int)

    mesh = Mesh(type=mesh_type)
    if mesh_type not in MESH_TYPES:
        return mesh

    coords = take(nverts * 3, float)
    mesh.vertices = [Point3(*coords[k:k + 3]) for k in range(0, len(coords), 3)]

    indices = take(nfaces * 3, int)
    mesh.faces = [tuple(indices[k:k + 3]) for k in range(0, len(indices), 3)]
    for face in mesh.faces:
        if any(idx < 0 or idx >= nverts for idx in face):
            raise MeshError(f"{path}: face index out of range in {face}")

    if mesh_type == 'triangle_n':
        coords = take(nverts * 3, float)
        mesh.normals = [Vec3(*coords[k:k + 3]) for k in range(0, len(coords), 3)]

    return mesh


def load_mesh(filename: str) -> Mesh:
    """Load a mesh file, choosing the format from the extension.

    Args:
        filename: Path to a `.obj` file or a plain token mesh

    Returns:
        The loaded Mesh; its type may be unknown, which `mesh_triangles`
        reports as MeshTypeError

    Raises:
        FileNotFoundError: If the file does not exist
        MeshError: If the file content is malformed
    """
    path = Path(filename)
    if not path.exists():
        raise FileNotFoundError(f"Mesh file not found: {filename}")

    if path.suffix.lower() == '.obj':
        mesh = OBJLoader().load(str(path))
    else:
        mesh = _load_token_mesh(path)

    logger.debug("Loaded %s mesh %s: %d vertices, %d faces",
                 mesh.type, filename, len(mesh.vertices), len(mesh.faces))
    return mesh
