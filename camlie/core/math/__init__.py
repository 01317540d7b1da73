"""Math primitives for camlie."""

from .numerics import epsilon, epsilon_sqrt, normalize_ray, supported_dtype
from .so3 import (
    hat,
    vee,
    so3_exp,
    so3_log,
    right_jacobian_so3,
    right_jacobian_inv_so3,
    left_jacobian_so3,
    left_jacobian_inv_so3,
)
from .se3 import (
    se3_exp,
    se3_log,
    se3_expd,
    se3_logd,
    compose,
    invert,
    adjoint,
    right_jacobian_se3_decoupled,
    right_jacobian_inv_se3_decoupled,
)
from .jacobians import JacobianCheckOptions, finite_difference_jacobian, check_jacobian

__all__ = [
    "epsilon",
    "epsilon_sqrt",
    "supported_dtype",
    "normalize_ray",
    "hat",
    "vee",
    "so3_exp",
    "so3_log",
    "right_jacobian_so3",
    "right_jacobian_inv_so3",
    "left_jacobian_so3",
    "left_jacobian_inv_so3",
    "se3_exp",
    "se3_log",
    "se3_expd",
    "se3_logd",
    "compose",
    "invert",
    "adjoint",
    "right_jacobian_se3_decoupled",
    "right_jacobian_inv_se3_decoupled",
    "JacobianCheckOptions",
    "finite_difference_jacobian",
    "check_jacobian",
]
