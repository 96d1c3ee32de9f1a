"""Tests for geometric shapes."""

import pytest
import math
from whitted.vec3 import Vec3, Point3, Color
from whitted.ray import Ray
from whitted.shapes import Sphere, Plane, Triangle, ShapeList
from whitted.materials import Material, DEFAULT_MATERIAL

INF = float('inf')
EPS = 1e-4


class TestSphere:
    """Test Sphere class."""

    def test_creation(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        assert sphere.center == Point3(0, 0, 0)
        assert sphere.radius == 1.0
        assert sphere.material is DEFAULT_MATERIAL

    def test_returns_entry_point(self):
        sphere = Sphere(Point3(0, 0, -5), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        hit = sphere.intersect(ray, EPS, INF)

        assert hit is not None
        assert abs(hit.t - 4.0) < 1e-9
        assert hit.point == Point3(0, 0, -4)
        assert hit.normal == Vec3(0, 0, 1)

    def test_non_unit_direction(self):
        sphere = Sphere(Point3(0, 0, -5), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -2))
        hit = sphere.intersect(ray, EPS, INF)

        assert hit is not None
        assert abs(hit.t - 2.0) < 1e-9
        assert hit.point == Point3(0, 0, -4)

    def test_falls_back_to_far_root(self):
        sphere = Sphere(Point3(0, 0, -5), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        hit = sphere.intersect(ray, 4.5, INF)

        assert hit is not None
        assert abs(hit.t - 6.0) < 1e-9

    def test_from_inside(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        hit = sphere.intersect(ray, EPS, INF)

        assert hit is not None
        assert abs(hit.t - 1.0) < 1e-9
        # Normal stays outward
        assert hit.normal == Vec3(0, 0, 1)

    def test_surface_origin_pointing_out_misses(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(1, 0, 0), Vec3(1, 0, 0))
        assert sphere.intersect(ray, EPS, INF) is None

    def test_miss(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 5, -5), Vec3(0, 0, 1))
        assert sphere.intersect(ray, EPS, INF) is None

    def test_tangent_is_miss(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 1, -5), Vec3(0, 0, 1))
        assert sphere.intersect(ray, EPS, INF) is None

    def test_behind_ray(self):
        sphere = Sphere(Point3(0, 0, -5), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        assert sphere.intersect(ray, EPS, INF) is None

    def test_t_max_is_inclusive(self):
        sphere = Sphere(Point3(0, 0, -5), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert sphere.intersect(ray, EPS, 4.0) is not None
        assert sphere.intersect(ray, EPS, 3.9) is None

    def test_with_material(self):
        material = Material.make_diffuse(Color(0, 0, 0), Color(1, 0, 0))
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        hit = sphere.intersect(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)), EPS, INF)

        assert hit is not None
        assert hit.material is material


class TestPlane:
    """Test Plane class."""

    def test_hit_perpendicular(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        hit = plane.intersect(Ray(Point3(0, 5, 0), Vec3(0, -1, 0)), EPS, INF)

        assert hit is not None
        assert abs(hit.t - 5.0) < 1e-9
        assert abs(hit.point.y) < 1e-9

    def test_normal_is_normalized(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 3, 0))
        hit = plane.intersect(Ray(Point3(0, 5, 0), Vec3(0, -1, 0)), EPS, INF)

        assert hit is not None
        assert hit.normal == Vec3(0, 1, 0)

    def test_hit_at_angle(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        hit = plane.intersect(Ray(Point3(0, 5, -5), Vec3(0, -1, 1)), EPS, INF)

        assert hit is not None
        assert abs(hit.t - 5.0) < 1e-9
        assert hit.point == Point3(0, 0, 0)

    def test_hit_from_below(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        hit = plane.intersect(Ray(Point3(0, -2, 0), Vec3(0, 1, 0)), EPS, INF)

        assert hit is not None
        assert abs(hit.t - 2.0) < 1e-9

    def test_miss_parallel(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        assert plane.intersect(Ray(Point3(0, 5, 0), Vec3(1, 0, 0)), EPS, INF) is None

    def test_miss_pointing_away(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        assert plane.intersect(Ray(Point3(0, 5, 0), Vec3(0, 1, 0)), EPS, INF) is None

    def test_out_of_range(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        assert plane.intersect(Ray(Point3(0, 5, 0), Vec3(0, -1, 0)), EPS, 4.0) is None


class TestTriangle:
    """Test Triangle class."""

    @pytest.fixture
    def triangle(self):
        return Triangle(Point3(0, 0, 0), Point3(1, 0, 0), Point3(0, 1, 0))

    def test_hit_inside(self, triangle):
        hit = triangle.intersect(Ray(Point3(0.25, 0.25, 1), Vec3(0, 0, -1)), EPS, INF)

        assert hit is not None
        assert abs(hit.t - 1.0) < 1e-9
        assert hit.u >= 0 and hit.v >= 0
        assert hit.u + hit.v <= 1
        assert abs(hit.u - 0.25) < 1e-9
        assert abs(hit.v - 0.25) < 1e-9
        assert hit.point == Point3(0.25, 0.25, 0)

    def test_miss_outside(self, triangle):
        hit = triangle.intersect(Ray(Point3(0.9, 0.9, 1), Vec3(0, 0, -1)), EPS, INF)
        assert hit is None

    def test_miss_negative_barycentric(self, triangle):
        assert triangle.intersect(Ray(Point3(-0.1, 0.5, 1), Vec3(0, 0, -1)), EPS, INF) is None
        assert triangle.intersect(Ray(Point3(0.5, -0.1, 1), Vec3(0, 0, -1)), EPS, INF) is None

    def test_miss_parallel(self, triangle):
        assert triangle.intersect(Ray(Point3(0.2, 0.2, 1), Vec3(1, 0, 0)), EPS, INF) is None

    def test_miss_out_of_range(self, triangle):
        assert triangle.intersect(Ray(Point3(0.25, 0.25, 1), Vec3(0, 0, -1)), EPS, 0.5) is None

    def test_default_face_normal(self, triangle):
        hit = triangle.intersect(Ray(Point3(0.25, 0.25, 1), Vec3(0, 0, -1)), EPS, INF)

        assert hit is not None
        assert triangle.n0 == triangle.n1 == triangle.n2 == Vec3(0, 0, 1)
        assert hit.normal == Vec3(0, 0, 1)

    def test_interpolates_vertex_normals(self):
        n0 = Vec3(0, 0, 1)
        n1 = Vec3(1, 0, 1)
        n2 = Vec3(0, 1, 1)
        tri = Triangle(Point3(0, 0, 0), Point3(1, 0, 0), Point3(0, 1, 0), n0, n1, n2)

        hit = tri.intersect(Ray(Point3(0.25, 0.25, 1), Vec3(0, 0, -1)), EPS, INF)

        assert hit is not None
        expected = (
            n0.normalize() * 0.5 + n1.normalize() * 0.25 + n2.normalize() * 0.25
        ).normalize()
        assert hit.normal == expected
        assert abs(hit.normal.length() - 1.0) < 1e-9

    def test_normal_at_vertex_matches_vertex_normal(self):
        n1 = Vec3(1, 0, 1).normalize()
        tri = Triangle(
            Point3(0, 0, 0), Point3(1, 0, 0), Point3(0, 1, 0),
            Vec3(0, 0, 1), n1, Vec3(0, 0, 1)
        )
        hit = tri.intersect(Ray(Point3(0.999, 0.0005, 1), Vec3(0, 0, -1)), EPS, INF)

        assert hit is not None
        assert abs(hit.normal.dot(n1) - 1.0) < 1e-3


class TestShapeList:
    """Test nearest-hit selection."""

    def test_empty(self):
        shapes = ShapeList()
        assert len(shapes) == 0
        assert shapes.closest_hit(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)), EPS) is None

    def test_closest_hit_regardless_of_order(self):
        near = Sphere(Point3(0, 0, -5), 1.0)
        far = Sphere(Point3(0, 0, -10), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))

        for order in ([far, near], [near, far]):
            hit = ShapeList(order).closest_hit(ray, EPS)
            assert hit is not None
            assert abs(hit.t - 4.0) < 1e-9

    def test_respects_t_max(self):
        shapes = ShapeList([Sphere(Point3(0, 0, -5), 1.0)])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert shapes.closest_hit(ray, EPS, 3.0) is None

    def test_iteration(self):
        a = Sphere(Point3(0, 0, 0), 1.0)
        b = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        shapes = ShapeList()
        shapes.add(a)
        shapes.extend([b])
        assert list(shapes) == [a, b]
