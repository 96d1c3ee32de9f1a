"""
Phong-style materials for the Whitted shading model.

A material carries the reflectance colors used by local illumination
(ambient, diffuse, specular with a Phong exponent) and the optional
recursive terms: mirror reflectance and glass transmission with an index
of refraction. Materials are immutable and shared by reference between
shapes.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .vec3 import Color


def _black() -> Color:
    return Color(0, 0, 0)


@dataclass(frozen=True, eq=False)
class Material:
    """Reflectance description of a surface.

    Attributes:
        ka: Ambient reflectance
        kd: Diffuse reflectance
        ks: Specular reflectance
        phong_exp: Phong exponent controlling highlight sharpness
        kr: Mirror reflectance (weights the reflected ray)
        kt: Transmission color (weights the refracted ray)
        ior: Index of refraction for transmissive materials
    """
    ka: Color = field(default_factory=_black)
    kd: Color = field(default_factory=_black)
    ks: Color = field(default_factory=_black)
    phong_exp: float = 1.0
    kr: Color = field(default_factory=_black)
    kt: Color = field(default_factory=_black)
    ior: float = 1.0

    @property
    def is_reflective(self) -> bool:
        return not self.kr.is_black()

    @property
    def is_transmissive(self) -> bool:
        return not self.kt.is_black()

    @classmethod
    def make_diffuse(cls, ka: Color, kd: Color) -> Material:
        return cls(ka=ka, kd=kd)

    @classmethod
    def make_specular(cls, ka: Color, kd: Color, ks: Color, phong_exp: float) -> Material:
        return cls(ka=ka, kd=kd, ks=ks, phong_exp=phong_exp)

    @classmethod
    def make_mirror(cls, kr: Color) -> Material:
        return cls(kr=kr)

    @classmethod
    def make_glass(cls, kr: Color, kt: Color, ior: float) -> Material:
        return cls(kr=kr, kt=kt, ior=ior)

    @classmethod
    def make_super(
        cls,
        ka: Color,
        kd: Color,
        ks: Color,
        phong_exp: float,
        kr: Color,
        kt: Color,
        ior: float
    ) -> Material:
        """Material carrying every term at once (diffuse+specular+mirror+glass)."""
        return cls(ka=ka, kd=kd, ks=ks, phong_exp=phong_exp, kr=kr, kt=kt, ior=ior)


# Shapes declared before any material use a white diffuse surface
DEFAULT_MATERIAL = Material.make_diffuse(Color(0, 0, 0), Color(1, 1, 1))
