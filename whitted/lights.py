"""
Light sources for the ray tracer.

Implements:
- Point lights (constant intensity, no distance falloff)
- Spot lights (point light restricted to a cone with angular falloff)
- Rectangular area lights, expanded into a grid of point lights
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import math

from .vec3 import Vec3, Point3, Color


@dataclass
class LightSample:
    """Result of sampling a light source from a surface point."""
    position: Point3      # Where the light is
    direction: Vec3       # Unnormalized vector from the surface point to the light
    distance: float       # Length of direction
    intensity: Color      # Light intensity arriving at the surface point


class Light(ABC):
    """Abstract base class for light sources."""

    @abstractmethod
    def sample(self, point: Point3) -> Optional[LightSample]:
        """Sample the light from a given point.

        Args:
            point: The surface point being illuminated

        Returns:
            LightSample, or None when the light does not reach the point
        """


class PointLight(Light):
    """A point light source.

    Point lights emit light equally in all directions from a single point.
    Intensity does not fall off with distance.
    """

    def __init__(self, position: Point3, intensity: Color):
        self.position = position
        self.intensity = intensity

    def sample(self, point: Point3) -> Optional[LightSample]:
        direction = self.position - point
        return LightSample(
            position=self.position,
            direction=direction,
            distance=direction.length(),
            intensity=self.intensity
        )

    def __repr__(self) -> str:
        return f"PointLight(position={self.position}, intensity={self.intensity})"


class SpotLight(Light):
    """A point light that only shines inside a cone.

    Within the cone the intensity is scaled by cos(angle)^exponent, where
    angle is measured from the cone axis.
    """

    def __init__(
        self,
        apex: Point3,
        target: Point3,
        exponent: float,
        cutoff: float,
        intensity: Color
    ):
        """Create a spot light.

        Args:
            apex: Position of the light
            target: Point the cone axis passes through
            exponent: Angular falloff exponent
            cutoff: Cone half-angle in degrees
            intensity: Intensity on the axis
        """
        self.apex = apex
        self.target = target
        self.axis = (target - apex).normalize()
        self.exponent = exponent
        self.cutoff = cutoff
        self.cos_cutoff = math.cos(math.radians(cutoff))
        self.intensity = intensity

    def sample(self, point: Point3) -> Optional[LightSample]:
        direction = self.apex - point
        distance = direction.length()
        if distance == 0:
            return None

        # Angle between the cone axis and the apex-to-point vector
        cos_angle = (-direction).dot(self.axis) / distance
        if cos_angle < self.cos_cutoff:
            return None

        falloff = max(cos_angle, 0.0) ** self.exponent
        return LightSample(
            position=self.apex,
            direction=direction,
            distance=distance,
            intensity=self.intensity * falloff
        )

    def __repr__(self) -> str:
        return f"SpotLight(apex={self.apex}, target={self.target}, cutoff={self.cutoff})"


def make_area_lights(
    corner: Point3,
    edge1: Vec3,
    edge2: Vec3,
    nu: int,
    nv: int,
    intensity: Color
) -> list[PointLight]:
    """Approximate a rectangular area light by a grid of point lights.

    The rectangle spans corner + s*edge1 + t*edge2 for s, t in [0, 1]. One
    point light sits at the centre of each of the nu x nv cells and carries
    an equal share of the total intensity, which gives soft shadow edges.

    Args:
        corner: One corner of the rectangle
        edge1: Vector along one edge
        edge2: Vector along the other edge
        nu, nv: Number of cells along edge1 and edge2
        intensity: Total intensity of the area light

    Returns:
        List of nu * nv point lights
    """
    nu = max(int(nu), 1)
    nv = max(int(nv), 1)
    share = intensity / float(nu * nv)

    lights = []
    for i in range(nu):
        for j in range(nv):
            position = corner + edge1 * ((i + 0.5) / nu) + edge2 * ((j + 0.5) / nv)
            lights.append(PointLight(position, share))
    return lights
