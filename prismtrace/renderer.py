"""
Renderer module - the heart of the ray tracer.

Implements:
- Path tracing with a hard bounce limit
- Sky gradient background
- Multi-threaded row-based rendering with a private random stream per row
- Gamma-corrected 8-bit output
"""

from __future__ import annotations
import logging
import math
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Callable, Tuple
import numpy as np

from .vec3 import Color
from .ray import Ray
from .camera import Camera
from .shapes import Hittable

logger = logging.getLogger(__name__)

MAX_DEPTH = 50
T_MIN = 0.001

BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)
SKY_BLUE = Color(0.5, 0.7, 1.0)


def sky_color(ray: Ray) -> Color:
    """Generate a sky gradient background.

    Args:
        ray: The ray direction to use for gradient

    Returns:
        White at the bottom blending to light blue at the top
    """
    unit_direction = ray.direction.normalize()
    t = 0.5 * unit_direction.y + 0.5
    return WHITE * (1.0 - t) + SKY_BLUE * t


def trace(
    ray: Ray,
    world: Hittable,
    rng: np.random.Generator,
    max_depth: int = MAX_DEPTH,
    depth: int = 0,
    t_min: float = T_MIN
) -> Tuple[Color, int]:
    """Follow one light path through the scene.

    The path is walked iteratively, carrying the product of attenuations
    collected so far. It ends when the ray escapes to the sky, when a
    material absorbs it, or when a surface is hit at `depth >= max_depth`.

    Args:
        ray: The ray to trace
        world: The scene to trace against
        rng: Random stream for material sampling
        max_depth: Bounce limit; hits at this depth contribute black
        depth: Bounce count already spent on this path
        t_min: Lower bound of the hit range, excludes self-intersection

    Returns:
        Tuple of (radiance, number of scatter events evaluated)
    """
    throughput = WHITE
    scatters = 0

    while True:
        hit_record = world.hit(ray, t_min, math.inf)

        if hit_record is None:
            return throughput * sky_color(ray), scatters

        if depth >= max_depth:
            return BLACK, scatters

        scatters += 1
        result = hit_record.material.scatter(ray, hit_record, rng)
        if result is None:
            return BLACK, scatters

        throughput = throughput * result.attenuation
        ray = result.scattered_ray
        depth += 1


def ray_color(
    ray: Ray,
    world: Hittable,
    rng: np.random.Generator,
    max_depth: int = MAX_DEPTH,
    depth: int = 0,
    t_min: float = T_MIN
) -> Color:
    """Compute the color for a ray using path tracing."""
    color, _ = trace(ray, world, rng, max_depth, depth, t_min)
    return color


def to_ldr(image: np.ndarray) -> np.ndarray:
    """Convert a linear float image to 8-bit with gamma 2 correction.

    Args:
        image: Float image array of shape (..., 3)

    Returns:
        uint8 array of the same shape, saturated into [0, 255]
    """
    corrected = np.sqrt(np.clip(image, 0, None))
    return np.clip(corrected * 255.99, 0, 255).astype(np.uint8)


class RayCounter:
    """Thread-safe running total of rays traced."""

    def __init__(self):
        self._lock = threading.Lock()
        self._value = 0

    def add(self, n: int) -> None:
        with self._lock:
            self._value += n

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 800
    height: int = 600
    samples_per_pixel: int = 100
    max_depth: int = MAX_DEPTH
    num_threads: int = 0  # 0 = auto-detect
    seed: Optional[int] = None
    t_min: float = T_MIN

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth <= 0:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        if self.num_threads < 0:
            raise ValueError(f"num_threads must be 0 (auto) or positive, got {self.num_threads}")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass
class RenderStats:
    """Timing and ray totals for one finished render."""
    elapsed: float
    total_rays: int

    @property
    def rays_per_second(self) -> float:
        if self.elapsed <= 0:
            return 0.0
        return self.total_rays / self.elapsed


class Renderer:
    """Path tracing renderer with multi-threading support."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self.stats: Optional[RenderStats] = None
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, world: Hittable, camera: Camera) -> np.ndarray:
        """Render the scene and return the image as a numpy array.

        Every row is an independent task with its own random stream
        spawned from the settings seed, so the output depends only on the
        seed and not on the thread count.

        Args:
            world: The scene to render (any Hittable)
            camera: The camera to render from

        Returns:
            uint8 RGB image of shape (height, width, 3), row 0 at the top
        """
        width = self.settings.width
        height = self.settings.height
        samples = self.settings.samples_per_pixel
        max_depth = self.settings.max_depth
        t_min = self.settings.t_min

        logger.info(
            "Rendering %dx%d, %d samples/pixel, %d thread(s)",
            width, height, samples, self.settings.num_threads
        )

        row_seeds = np.random.SeedSequence(self.settings.seed).spawn(height)
        counter = RayCounter()
        progress_lock = threading.Lock()
        completed_rows = [0]  # Use list for mutable in closure

        def render_row(y: int) -> Tuple[int, np.ndarray]:
            """Render one image row with its own random stream."""
            rng = np.random.default_rng(row_seeds[y])
            row = np.zeros((width, 3), dtype=np.float64)

            for x in range(width):
                pixel_color = BLACK
                rays = 0

                for _ in range(samples):
                    u = (x + rng.random()) / width
                    v = 1.0 - (y + rng.random()) / height
                    ray = camera.get_ray(u, v, rng)
                    color, scatters = trace(ray, world, rng, max_depth, 0, t_min)
                    pixel_color = pixel_color + color
                    rays += 1 + scatters

                row[x] = pixel_color.to_array() / samples
                counter.add(rays)

            if self._progress_callback:
                with progress_lock:
                    completed_rows[0] += 1
                    self._progress_callback(completed_rows[0] / height)

            return y, to_ldr(row)

        start_time = time.perf_counter()

        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                results = list(executor.map(render_row, range(height)))
        else:
            results = [render_row(y) for y in range(height)]

        # Rows are disjoint, assemble on the calling thread
        image = np.zeros((height, width, 3), dtype=np.uint8)
        for y, row in results:
            image[y] = row

        self.stats = RenderStats(
            elapsed=time.perf_counter() - start_time,
            total_rays=counter.value
        )
        logger.info(
            "Render finished in %.2fs: %d rays (%.0f rays/s)",
            self.stats.elapsed, self.stats.total_rays, self.stats.rays_per_second
        )

        return image

    @staticmethod
    def save_image(image: np.ndarray, filename: str) -> None:
        """Save an 8-bit RGB image to file.

        Args:
            image: uint8 image array of shape (height, width, 3)
            filename: Output filename (extension determines format)
        """
        from PIL import Image as PILImage

        pil_image = PILImage.fromarray(np.ascontiguousarray(image, dtype=np.uint8))
        pil_image.save(filename)
        logger.info("Saved image to %s", filename)
