"""
Scene description language parser.

Supports a YAML or JSON scene description format with:
- Camera configuration
- Render settings
- Materials library (shared between objects by name)
- Objects (spheres with materials)

Example scene file:
```yaml
camera:
  look_from: [-1.5, 1.5, 0.75]
  look_at: [0, 0, -1]
  vfov: 60
  aperture: 0.2

render:
  width: 400
  height: 200
  samples: 100
  max_depth: 50
  seed: 7

materials:
  ground:
    type: lambertian
    albedo: [0.6, 0.6, 0.6]

  glass:
    type: dielectric
    ior: 1.5

objects:
  - type: sphere
    center: [0, -100.5, -1]
    radius: 100
    material: ground

  # Hollow bubble: the inner sphere has a negative radius
  - type: sphere
    center: [0, 0, -1]
    radius: 0.5
    material: glass

  - type: sphere
    center: [0, 0, -1]
    radius: -0.47
    material: glass
```
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

from .vec3 import Vec3, Color, DegenerateVectorError
from .camera import Camera
from .shapes import Sphere, HittableList
from .materials import Material, Lambertian, Metal, Dielectric
from .renderer import RenderSettings

logger = logging.getLogger(__name__)


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


def _expect_mapping(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise SceneParseError(f"{what} must be a mapping, got {type(data).__name__}")
    return data


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.materials: Dict[str, Material] = {}
        self.objects: HittableList = HittableList()
        self.camera: Optional[Camera] = None
        self.settings: Optional[RenderSettings] = None
        self.camera_data: Dict[str, Any] = {}

    def parse_file(self, filepath: str) -> Tuple[HittableList, Camera, RenderSettings]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (scene, camera, settings)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()
        logger.debug("Parsing scene file %s", path)

        if path.suffix in ('.yaml', '.yml'):
            try:
                import yaml
            except ImportError:
                raise SceneParseError("PyYAML not installed. Install with: pip install pyyaml")
            try:
                data = yaml.safe_load(content)
            except yaml.YAMLError as e:
                raise SceneParseError(f"Invalid YAML in {filepath}: {e}") from e
        else:
            try:
                data = json.loads(content)
            except json.JSONDecodeError as e:
                raise SceneParseError(f"Invalid JSON in {filepath}: {e}") from e

        return self.parse_dict(_expect_mapping(data, "Scene file"))

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[HittableList, Camera, RenderSettings]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, camera, settings)
        """
        # Parse materials first (objects reference them)
        if 'materials' in data:
            self._parse_materials(_expect_mapping(data['materials'], "'materials'"))

        if 'objects' in data:
            objects = data['objects']
            if not isinstance(objects, list):
                raise SceneParseError(f"'objects' must be a list, got {type(objects).__name__}")
            self._parse_objects(objects)

        # Settings before camera, the default aspect ratio comes from the image size
        if 'render' in data:
            self._parse_settings(_expect_mapping(data['render'], "'render'"))
        else:
            self.settings = RenderSettings()

        self.camera_data = _expect_mapping(data.get('camera', {}), "'camera'")
        self.camera = self.build_camera()

        logger.debug(
            "Parsed scene: %d material(s), %d object(s)",
            len(self.materials), len(self.objects)
        )
        return self.objects, self.camera, self.settings

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from various formats."""
        try:
            if isinstance(data, (list, tuple)):
                if len(data) != 3:
                    raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
                return Vec3(float(data[0]), float(data[1]), float(data[2]))
            elif isinstance(data, dict):
                return Vec3(
                    float(data.get('x', 0)),
                    float(data.get('y', 0)),
                    float(data.get('z', 0))
                )
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}") from e
        raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, dict):
            data = [data.get('r', 0), data.get('g', 0), data.get('b', 0)]
        elif isinstance(data, str):
            # Handle hex colors
            hex_color = data[1:] if data.startswith('#') else ''
            if len(hex_color) != 6:
                raise SceneParseError(f"Cannot parse color from string: {data}")
            try:
                return Color(*(int(hex_color[i:i + 2], 16) / 255.0 for i in (0, 2, 4)))
            except ValueError as e:
                raise SceneParseError(f"Cannot parse color from string: {data}") from e
        return self._parse_vec3(data)

    def _parse_material(self, name: str, mat_data: Dict[str, Any]) -> Material:
        mat_type = str(mat_data.get('type', 'lambertian')).lower()

        if mat_type == 'lambertian':
            albedo = self._parse_color(mat_data.get('albedo', [0.5, 0.5, 0.5]))
            return Lambertian(albedo)

        elif mat_type == 'metal':
            albedo = self._parse_color(mat_data.get('albedo', [0.8, 0.8, 0.8]))
            roughness = float(mat_data.get('roughness', 0.0))
            return Metal(albedo, roughness)

        elif mat_type == 'dielectric':
            ior = float(mat_data.get('ior', 1.5))
            return Dielectric(ior)

        raise SceneParseError(f"Unknown material type for '{name}': {mat_type}")

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        for name, mat_data in materials_data.items():
            mat_data = _expect_mapping(mat_data, f"Material '{name}'")
            self.materials[name] = self._parse_material(name, mat_data)

    def _get_material(self, mat_ref: Any) -> Material:
        """Get a material by name or inline definition."""
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._parse_material('<inline>', mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: list) -> None:
        """Parse objects section."""
        for obj_data in objects_data:
            obj_data = _expect_mapping(obj_data, "Object entry")
            obj_type = str(obj_data.get('type', 'sphere')).lower()
            if obj_type != 'sphere':
                raise SceneParseError(f"Unknown object type: {obj_type}")

            if 'material' not in obj_data:
                raise SceneParseError(f"Object has no material: {obj_data}")
            material = self._get_material(obj_data['material'])

            center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
            radius = float(obj_data.get('radius', 1.0))
            self.objects.add(Sphere(center, radius, material))

    def build_camera(self, aspect_ratio: Optional[float] = None) -> Camera:
        """Build a camera from the parsed camera section.

        An `aspect_ratio` given in the scene file always wins. Otherwise
        the argument is used, falling back to the parsed render settings,
        so callers that change the image size can rebuild a matching camera.

        Raises:
            SceneParseError: If the camera basis is degenerate
        """
        camera_data = self.camera_data
        look_from = self._parse_vec3(camera_data.get('look_from', [0, 0, 5]))
        look_at = self._parse_vec3(camera_data.get('look_at', [0, 0, 0]))
        vup = self._parse_vec3(camera_data.get('vup', [0, 1, 0]))
        vfov = float(camera_data.get('vfov', 60))
        aperture = float(camera_data.get('aperture', 0.0))

        if 'aspect_ratio' in camera_data:
            aspect_ratio = float(camera_data['aspect_ratio'])
        elif aspect_ratio is None:
            aspect_ratio = self.settings.aspect_ratio

        if 'focus_dist' in camera_data:
            focus_dist = float(camera_data['focus_dist'])
        else:
            focus_dist = (look_at - look_from).length()

        try:
            return Camera(
                look_from=look_from,
                look_at=look_at,
                vup=vup,
                vfov=vfov,
                aspect_ratio=aspect_ratio,
                aperture=aperture,
                focus_dist=focus_dist
            )
        except DegenerateVectorError as e:
            raise SceneParseError(
                "Invalid camera: look_from must differ from look_at and vup "
                f"must not be parallel to the view direction ({e})"
            ) from e

    def _parse_settings(self, settings_data: Dict[str, Any]) -> None:
        """Parse render settings section."""
        seed = settings_data.get('seed')
        try:
            self.settings = RenderSettings(
                width=int(settings_data.get('width', 800)),
                height=int(settings_data.get('height', 600)),
                samples_per_pixel=int(settings_data.get('samples', 100)),
                max_depth=int(settings_data.get('max_depth', 50)),
                num_threads=int(settings_data.get('threads', 0)),
                seed=int(seed) if seed is not None else None
            )
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"Invalid render settings: {e}") from e


def load_scene(filepath: str) -> Tuple[HittableList, Camera, RenderSettings]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any]) -> Tuple[HittableList, Camera, RenderSettings]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_dict(data)
