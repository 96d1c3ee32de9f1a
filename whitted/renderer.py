"""
Renderer module - the heart of the ray tracer.

Implements:
- Whitted-style recursive ray tracing (Phong direct lighting, hard
  shadows, mirror reflection and refraction up to a depth limit)
- Per-pixel supersampling on a jittered grid
- Multi-threaded tile-based rendering
- Tone mapping and 8-bit image output
"""

from __future__ import annotations
import logging
import math
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Callable, Tuple
import numpy as np

from .vec3 import Color, reflect, refract
from .ray import Ray
from .scene import Scene
from .shapes import HitRecord
from .lights import LightSample
from .tonemapping import ExposureToneMapper, to_8bit, flip_vertical

logger = logging.getLogger(__name__)


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    num_threads: int = 0  # 0 = auto-detect
    tile_size: int = 32
    gamma: float = 2.2
    epsilon: float = 1e-4  # t_min for every ray, avoids self-intersection
    seed: Optional[int] = None  # jitter seed for supersampling
    jitter: bool = True  # jitter supersamples inside their grid cells

    def __post_init__(self):
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4


class Renderer:
    """Recursive ray tracer with multi-threading support."""

    def __init__(self, settings: Optional[RenderSettings] = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, scene: Scene) -> np.ndarray:
        """Render the scene and return the image as a numpy array.

        Args:
            scene: Fully constructed scene; it is only read

        Returns:
            HDR image as numpy array of shape (height, width, 3) with row 0
            at the bottom of the frame
        """
        width = scene.width
        height = scene.height

        logger.info(
            "Rendering %dx%d, %d shapes, %d lights, %dx%d samples, %d threads",
            width, height, len(scene.shapes), len(scene.lights),
            scene.xsample, scene.ysample, self.settings.num_threads
        )

        image = np.zeros((height, width, 3), dtype=np.float64)

        tiles = self._generate_tiles(width, height)
        total_tiles = len(tiles)
        completed_tiles = [0]
        progress_lock = threading.Lock()

        def render_tile(indexed_tile: Tuple[int, Tuple[int, int, int, int]]) -> Tuple[Tuple, np.ndarray]:
            """Render a single tile."""
            index, tile = indexed_tile
            x0, y0, x1, y1 = tile
            rng = np.random.default_rng(
                None if self.settings.seed is None else [self.settings.seed, index]
            )
            tile_image = np.zeros((y1 - y0, x1 - x0, 3), dtype=np.float64)

            for j in range(y0, y1):
                for i in range(x0, x1):
                    tile_image[j - y0, i - x0] = self._render_pixel(scene, i, j, rng)

            with progress_lock:
                completed_tiles[0] += 1
                done = completed_tiles[0]
            logger.debug("Tile %s done (%d/%d)", tile, done, total_tiles)
            if self._progress_callback:
                self._progress_callback(done / total_tiles)

            return tile, tile_image

        indexed_tiles = list(enumerate(tiles))
        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                results = list(executor.map(render_tile, indexed_tiles))
        else:
            results = [render_tile(tile) for tile in indexed_tiles]

        # Combine tiles into final image
        for tile, tile_image in results:
            x0, y0, x1, y1 = tile
            image[y0:y1, x0:x1] = tile_image

        return image

    def _render_pixel(self, scene: Scene, i: int, j: int, rng: np.random.Generator) -> np.ndarray:
        """Average the radiance of the supersampling grid for one pixel.

        Row j counts up from the bottom of the frame. A single sample is
        taken at the pixel's fractional-index corner; a larger grid jitters
        each sample inside its own cell.
        """
        xs, ys = scene.xsample, scene.ysample
        jitter = self.settings.jitter and xs * ys > 1
        camera = scene.camera

        total = np.zeros(3, dtype=np.float64)
        for sy in range(ys):
            for sx in range(xs):
                ox = (sx + (rng.random() if jitter else 0.0)) / xs
                oy = (sy + (rng.random() if jitter else 0.0)) / ys
                u = (i + ox) / scene.width
                v = 1.0 - (j + oy) / scene.height
                ray = camera.make_ray(u, v)
                total += self.trace(ray, scene, 0).to_array()

        return total / (xs * ys)

    def trace(self, ray: Ray, scene: Scene, depth: int) -> Color:
        """Compute the radiance arriving along a ray.

        Args:
            ray: The ray to trace
            scene: The scene to trace against
            depth: Current recursion depth (0 for primary rays)

        Returns:
            The radiance for this ray
        """
        if depth > scene.max_depth:
            return scene.background

        hit = scene.shapes.closest_hit(ray, self.settings.epsilon)
        if hit is None:
            return scene.background

        return self._shade(ray, hit, scene, depth)

    def _shade(self, ray: Ray, hit: HitRecord, scene: Scene, depth: int) -> Color:
        """Local illumination plus recursive mirror and glass terms."""
        material = hit.material
        color = Color(0, 0, 0)

        for light in scene.lights:
            sample = light.sample(hit.point)
            if sample is None or self._in_shadow(hit, sample, scene):
                continue
            color = color + self._direct_light(ray, hit, sample)

        # Ambient is never shadowed
        color = color + material.ka * scene.ambient

        if material.is_reflective or material.is_transmissive:
            incoming = ray.direction.normalize()

            if material.is_reflective:
                mirrored = reflect(-incoming, hit.normal)
                color = color + material.kr * self.trace(Ray(hit.point, mirrored), scene, depth + 1)

            if material.is_transmissive:
                refracted = refract(incoming, hit.normal, material.ior)
                if refracted is not None:
                    color = color + material.kt * self.trace(Ray(hit.point, refracted), scene, depth + 1)

        return color

    def _in_shadow(self, hit: HitRecord, sample: LightSample, scene: Scene) -> bool:
        """True if any shape lies strictly between the hit point and the light."""
        if sample.distance == 0:
            return False
        shadow_ray = Ray(hit.point, sample.direction / sample.distance)
        blocker = scene.shapes.closest_hit(shadow_ray, self.settings.epsilon, sample.distance)
        return blocker is not None and blocker.t < sample.distance

    @staticmethod
    def _direct_light(ray: Ray, hit: HitRecord, sample: LightSample) -> Color:
        """Phong diffuse + specular response to one unoccluded light."""
        material = hit.material
        to_light = sample.direction.normalize()

        diffuse = material.kd * sample.intensity * max(hit.normal.dot(to_light), 0.0)

        if material.ks.is_black():
            return diffuse

        reflected = reflect(to_light, hit.normal)
        to_viewer = (-ray.direction).normalize()
        highlight = math.pow(max(reflected.dot(to_viewer), 0.0), material.phong_exp)
        return diffuse + material.ks * sample.intensity * highlight

    def _generate_tiles(self, width: int, height: int) -> list[Tuple[int, int, int, int]]:
        """Generate tiles for parallel rendering.

        Args:
            width: Image width
            height: Image height

        Returns:
            List of tiles as (x0, y0, x1, y1) tuples
        """
        tile_size = self.settings.tile_size
        tiles = []

        for y in range(0, height, tile_size):
            for x in range(0, width, tile_size):
                x1 = min(x + tile_size, width)
                y1 = min(y + tile_size, height)
                tiles.append((x, y, x1, y1))

        return tiles

    def to_ldr(self, hdr_image: np.ndarray, exposure: float = 1.0) -> np.ndarray:
        """Convert a bottom-up HDR image to a top-down 8-bit image.

        Args:
            hdr_image: HDR image array (float64), row 0 at the bottom
            exposure: Linear exposure multiplier

        Returns:
            LDR image as uint8 array, row 0 at the top
        """
        mapper = ExposureToneMapper(exposure, self.settings.gamma)
        return flip_vertical(to_8bit(mapper.apply(hdr_image)))

    def save_image(self, hdr_image: np.ndarray, filename: str, exposure: float = 1.0) -> None:
        """Tone map and save image to file.

        Args:
            hdr_image: HDR image array, row 0 at the bottom
            filename: Output filename (extension determines format)
            exposure: Linear exposure multiplier
        """
        from PIL import Image as PILImage

        ldr = self.to_ldr(hdr_image, exposure)
        PILImage.fromarray(ldr, 'RGB').save(filename)
        logger.info("Saved %dx%d image to %s", ldr.shape[1], ldr.shape[0], filename)
