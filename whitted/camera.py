"""
Camera module for generating primary rays.

A pinhole camera with a virtual image plane at unit distance in front of
the eye. Screen coordinates (u, v) start at the top-left corner and grow
right and down.
"""

from __future__ import annotations
import math
from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A look-at perspective camera."""

    def __init__(
        self,
        eye: Point3,
        at: Point3,
        up: Vec3 = Vec3(0, 1, 0),
        fovy: float = 45.0,
        aspect_ratio: float = 1.0
    ):
        """Create a camera.

        Args:
            eye: Camera position in world space
            at: Point the camera is looking at
            up: World up vector (usually (0, 1, 0))
            fovy: Vertical field of view in degrees
            aspect_ratio: Width / Height ratio
        """
        self.eye = eye
        self.fovy = fovy
        self.aspect_ratio = aspect_ratio

        # Orthonormal camera basis
        self.forward = (at - eye).normalize()
        self.right = self.forward.cross(up).normalize()
        self.up = self.right.cross(self.forward)

        self.half_height = math.tan(math.radians(fovy) / 2)
        self.half_width = self.half_height * aspect_ratio

    def make_ray(self, u: float, v: float) -> Ray:
        """Generate a primary ray through normalized screen coordinates.

        Args:
            u: Horizontal coordinate in [0, 1) (0 = left)
            v: Vertical coordinate in [0, 1) (0 = top)

        Returns:
            A ray from the eye whose direction is not normalized
        """
        direction = (
            self.forward
            + self.right * ((2 * u - 1) * self.half_width)
            + self.up * ((1 - 2 * v) * self.half_height)
        )
        return Ray(self.eye, direction)

    def __repr__(self) -> str:
        return f"Camera(eye={self.eye}, forward={self.forward}, fovy={self.fovy})"


def default_camera() -> Camera:
    """Camera used when a scene does not declare one."""
    return Camera(Point3(0, 0, 0), Point3(0, -1, 0), Vec3(0, 1, 0), 45.0, 1.0)
