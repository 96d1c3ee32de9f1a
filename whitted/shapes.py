"""
Geometric shapes for the ray tracer.

Each shape implements the Shape interface with an `intersect` method that
accepts hits whose parameter t lies in the half-open interval
(t_min, t_max]. Ray directions need not be unit length.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .materials import Material, DEFAULT_MATERIAL

# Below this the ray is treated as parallel to a plane or triangle
PARALLEL_EPSILON = 1e-12


@dataclass
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        point: The intersection point in world space
        t: The ray parameter at intersection
        normal: Unit outward surface normal at the hit point
        material: The material at the hit point
        u, v: Surface parameters (barycentric beta/gamma for triangles)
    """
    point: Point3
    t: float
    normal: Vec3
    material: Material
    u: float = 0.0
    v: float = 0.0


class Shape(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    material: Material

    @abstractmethod
    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test
            t_min: Exclusive lower bound on t (avoids self-intersection)
            t_max: Inclusive upper bound on t

        Returns:
            HitRecord if intersection found, None otherwise
        """


def _in_range(t: float, t_min: float, t_max: float) -> bool:
    return t_min < t <= t_max


class Sphere(Shape):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Material = DEFAULT_MATERIAL):
        self.center = center
        self.radius = radius
        self.material = material

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-sphere intersection using the quadratic formula.

        The equation (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0
        which is the quadratic at² + bt + c = 0.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        b = 2.0 * oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = b * b - 4 * a * c
        if discriminant <= 0:
            return None

        sqrtd = math.sqrt(discriminant)

        # Nearest root first, then the far one
        root = (-b - sqrtd) / (2 * a)
        if not _in_range(root, t_min, t_max):
            root = (-b + sqrtd) / (2 * a)
            if not _in_range(root, t_min, t_max):
                return None

        point = ray.at(root)
        return HitRecord(
            point=point,
            t=root,
            normal=(point - self.center).normalize(),
            material=self.material
        )

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Plane(Shape):
    """An infinite plane defined by a point and normal."""

    def __init__(self, point: Point3, normal: Vec3, material: Material = DEFAULT_MATERIAL):
        """Create a plane.

        Args:
            point: Any point on the plane
            normal: The plane's normal vector (will be normalized)
            material: Material for shading
        """
        self.point = point
        self.normal = normal.normalize()
        self.material = material

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-plane intersection."""
        denom = self.normal.dot(ray.direction)

        # Ray is parallel to plane
        if abs(denom) < PARALLEL_EPSILON:
            return None

        t = (self.point - ray.origin).dot(self.normal) / denom
        if not _in_range(t, t_min, t_max):
            return None

        return HitRecord(
            point=ray.at(t),
            t=t,
            normal=self.normal,
            material=self.material
        )

    def __repr__(self) -> str:
        return f"Plane(point={self.point}, normal={self.normal})"


class Triangle(Shape):
    """A triangle with optional per-vertex normals for smooth shading."""

    def __init__(
        self,
        p0: Point3, p1: Point3, p2: Point3,
        n0: Optional[Vec3] = None, n1: Optional[Vec3] = None, n2: Optional[Vec3] = None,
        material: Material = DEFAULT_MATERIAL
    ):
        """Create a triangle from three vertices.

        Args:
            p0, p1, p2: The three vertices in counter-clockwise order
            n0, n1, n2: Per-vertex normals; the face normal is used for
                any that are missing
            material: Material for shading
        """
        self.p0 = p0
        self.p1 = p1
        self.p2 = p2
        self.material = material

        # Pre-compute edges used by Cramer's rule
        self.a = p0 - p1
        self.b = p0 - p2
        self.face_normal = (p1 - p0).cross(p2 - p0).normalize()

        self.n0 = n0.normalize() if n0 is not None else self.face_normal
        self.n1 = n1.normalize() if n1 is not None else self.face_normal
        self.n2 = n2.normalize() if n2 is not None else self.face_normal

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-triangle intersection with Cramer's rule.

        Solves  beta*(p0-p1) + gamma*(p0-p2) + t*d = p0 - o  for beta, gamma
        and t at once. Each 3x3 determinant is a scalar triple product.
        """
        d = ray.direction
        rhs = self.p0 - ray.origin

        b_cross_d = self.b.cross(d)
        det = self.a.dot(b_cross_d)
        if abs(det) < PARALLEL_EPSILON:
            return None

        t = self.a.dot(self.b.cross(rhs)) / det
        if not _in_range(t, t_min, t_max):
            return None

        beta = rhs.dot(b_cross_d) / det
        if beta < 0.0:
            return None

        gamma = self.a.dot(rhs.cross(d)) / det
        if gamma < 0.0 or beta + gamma > 1.0:
            return None

        alpha = 1.0 - beta - gamma
        normal = (self.n0 * alpha + self.n1 * beta + self.n2 * gamma).normalize()

        return HitRecord(
            point=ray.at(t),
            t=t,
            normal=normal,
            material=self.material,
            u=beta,
            v=gamma
        )

    def __repr__(self) -> str:
        return f"Triangle(p0={self.p0}, p1={self.p1}, p2={self.p2})"


class ShapeList:
    """An ordered collection of shapes searched by brute-force linear scan."""

    def __init__(self, shapes: Optional[list[Shape]] = None):
        self.shapes: list[Shape] = shapes if shapes is not None else []

    def add(self, shape: Shape) -> None:
        """Add a shape to the list."""
        self.shapes.append(shape)

    def extend(self, shapes) -> None:
        self.shapes.extend(shapes)

    def closest_hit(self, ray: Ray, t_min: float, t_max: float = math.inf) -> Optional[HitRecord]:
        """Find the closest intersection among all shapes.

        Each hit shrinks t_max so later shapes only report nearer hits.
        """
        closest: Optional[HitRecord] = None
        closest_t = t_max

        for shape in self.shapes:
            hit = shape.intersect(ray, t_min, closest_t)
            if hit is not None:
                closest = hit
                closest_t = hit.t

        return closest

    def __len__(self) -> int:
        return len(self.shapes)

    def __iter__(self) -> Iterator[Shape]:
        return iter(self.shapes)
