"""Camera model family: projection, unprojection and their Jacobians."""

from .base import CameraModel, ProjectionResult, UnprojectionResult
from .pinhole import PinholeCamera
from .unified import UnifiedCamera
from .extended_unified import ExtendedUnifiedCamera
from .kannala_brandt import KannalaBrandtCamera4
from .double_sphere import DoubleSphereCamera
from .fov import FovCamera
from . import stereographic
from .generic import (
    CAMERA_TYPES,
    GenericCamera,
    camera_class,
    camera_names,
    create_camera,
    project_points,
    unproject_points,
)

__all__ = [
    "CameraModel",
    "ProjectionResult",
    "UnprojectionResult",
    "PinholeCamera",
    "UnifiedCamera",
    "ExtendedUnifiedCamera",
    "KannalaBrandtCamera4",
    "DoubleSphereCamera",
    "FovCamera",
    "stereographic",
    "CAMERA_TYPES",
    "GenericCamera",
    "camera_class",
    "camera_names",
    "create_camera",
    "project_points",
    "unproject_points",
]
