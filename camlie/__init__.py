"""camlie - Camera models and Lie-group Jacobians

Analytic projection/unprojection Jacobians for parametric camera models and
SO(3)/SE(3) perturbation Jacobians, for use inside nonlinear optimizers.
"""

__version__ = "0.1.0"

# Camera models
from .core.cameras import (
    CameraModel,
    DoubleSphereCamera,
    ExtendedUnifiedCamera,
    FovCamera,
    GenericCamera,
    KannalaBrandtCamera4,
    PinholeCamera,
    ProjectionResult,
    UnifiedCamera,
    UnprojectionResult,
    create_camera,
    stereographic,
)

# Lie group utilities
from .core.math.so3 import (
    left_jacobian_inv_so3,
    left_jacobian_so3,
    right_jacobian_inv_so3,
    right_jacobian_so3,
    so3_exp,
    so3_log,
)
from .core.math.se3 import (
    right_jacobian_inv_se3_decoupled,
    right_jacobian_se3_decoupled,
    se3_expd,
    se3_logd,
)

# Configuration
from .core.models.calibration import CameraCalibration

__all__ = [
    # Version
    "__version__",
    # Cameras
    "CameraModel",
    "ProjectionResult",
    "UnprojectionResult",
    "GenericCamera",
    "PinholeCamera",
    "UnifiedCamera",
    "ExtendedUnifiedCamera",
    "KannalaBrandtCamera4",
    "DoubleSphereCamera",
    "FovCamera",
    "stereographic",
    "create_camera",
    # Lie groups
    "so3_exp",
    "so3_log",
    "right_jacobian_so3",
    "right_jacobian_inv_so3",
    "left_jacobian_so3",
    "left_jacobian_inv_so3",
    "se3_expd",
    "se3_logd",
    "right_jacobian_se3_decoupled",
    "right_jacobian_inv_se3_decoupled",
    # Configuration
    "CameraCalibration",
]
