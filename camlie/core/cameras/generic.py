"""Generic camera: the sum of all parametric variants, lookup by name, batches."""

import logging

import numpy as np
from typing import Dict, List, Tuple, Type, Union

from .double_sphere import DoubleSphereCamera
from .extended_unified import ExtendedUnifiedCamera
from .fov import FovCamera
from .kannala_brandt import KannalaBrandtCamera4
from .pinhole import PinholeCamera
from .unified import UnifiedCamera

logger = logging.getLogger(__name__)

GenericCamera = Union[
    PinholeCamera,
    UnifiedCamera,
    ExtendedUnifiedCamera,
    KannalaBrandtCamera4,
    DoubleSphereCamera,
    FovCamera,
]

CAMERA_TYPES: Dict[str, Type[GenericCamera]] = {
    cls.name: cls
    for cls in (
        PinholeCamera,
        UnifiedCamera,
        ExtendedUnifiedCamera,
        KannalaBrandtCamera4,
        DoubleSphereCamera,
        FovCamera,
    )
}


def camera_names() -> List[str]:
    """Names accepted by :func:`create_camera`."""
    return list(CAMERA_TYPES)


def camera_class(name: str) -> Type[GenericCamera]:
    """Look up a camera class by its short name (e.g. "ds", "kb4")."""
    try:
        return CAMERA_TYPES[name]
    except KeyError:
        logger.debug("Unknown camera type requested: %r", name)
        raise ValueError(
            f"Unknown camera type {name!r}, expected one of {camera_names()}"
        ) from None


def create_camera(name: str, params, dtype=np.float64) -> GenericCamera:
    """Create a camera of type ``name`` from its full parameter vector."""
    cls = camera_class(name)
    camera = cls(params, dtype=dtype)
    logger.debug("Created %r", camera)
    return camera


def project_points(camera: GenericCamera, points) -> Tuple[np.ndarray, np.ndarray]:
    """Project a batch of rays.

    Args:
        camera: Any camera variant
        points: Mx4 array of homogeneous rays

    Returns:
        Tuple of (Mx2 pixels, M-element validity mask); invalid rows are NaN
    """
    points = np.atleast_2d(np.asarray(points, dtype=camera.dtype))
    if points.ndim != 2 or points.shape[1] != 4:
        raise ValueError(f"points must be Mx4 array, got shape {points.shape}")

    results = [camera.project(p) for p in points]
    proj = np.array([r.proj for r in results], dtype=camera.dtype).reshape(-1, 2)
    valid = np.array([r.valid for r in results], dtype=bool)
    return proj, valid


def unproject_points(camera: GenericCamera, pixels) -> Tuple[np.ndarray, np.ndarray]:
    """Unproject a batch of pixels.

    Args:
        camera: Any camera variant
        pixels: Mx2 array of image coordinates

    Returns:
        Tuple of (Mx4 unit rays, M-element validity mask); invalid rows are NaN
    """
    pixels = np.atleast_2d(np.asarray(pixels, dtype=camera.dtype))
    if pixels.ndim != 2 or pixels.shape[1] != 2:
        raise ValueError(f"pixels must be Mx2 array, got shape {pixels.shape}")

    results = [camera.unproject(uv) for uv in pixels]
    p3d = np.array([r.p3d for r in results], dtype=camera.dtype).reshape(-1, 4)
    valid = np.array([r.valid for r in results], dtype=bool)
    return p3d, valid
