"""Shared contract of the camera model family.

Every variant maps homogeneous rays ``(x, y, z, w)`` to pixels ``(u, v)`` and
back. Projection ignores ``w``; unprojection returns a unit ray with
``w = 0``. Jacobians are only evaluated when asked for.
"""

import numpy as np
from dataclasses import dataclass
from typing import ClassVar, List, Optional, Protocol, Tuple, runtime_checkable

from ..math.numerics import as_vector, supported_dtype


@dataclass(frozen=True)
class ProjectionResult:
    """Pixel for a ray, validity flag and optional Jacobians.

    d_proj_d_p3d is 2x4 (last column zero), d_proj_d_param is 2xN.
    """

    proj: np.ndarray
    valid: bool
    d_proj_d_p3d: Optional[np.ndarray] = None
    d_proj_d_param: Optional[np.ndarray] = None


@dataclass(frozen=True)
class UnprojectionResult:
    """Unit ray for a pixel, validity flag and optional Jacobians.

    d_p3d_d_proj is 4x2 and d_p3d_d_param is 4xN, both with a zero last row.
    """

    p3d: np.ndarray
    valid: bool
    d_p3d_d_proj: Optional[np.ndarray] = None
    d_p3d_d_param: Optional[np.ndarray] = None


@runtime_checkable
class CameraModel(Protocol):
    """Capability set every parametric camera variant provides."""

    name: ClassVar[str]
    N: ClassVar[int]
    params: np.ndarray

    def project(self, p3d, jacobians: bool = False) -> ProjectionResult: ...

    def unproject(self, proj, jacobians: bool = False) -> UnprojectionResult: ...

    def __iadd__(self, delta) -> "CameraModel": ...

    def copy(self) -> "CameraModel": ...

    @classmethod
    def test_projections(cls) -> List["CameraModel"]: ...

    @classmethod
    def from_init(cls, init, dtype=np.float64) -> "CameraModel": ...


class ParameterVector:
    """Parameter storage and additive update shared by the camera classes.

    Subclasses set ``name``, ``N``, ``PARAM_NAMES`` and
    ``DEFAULT_DISTORTION`` (the values appended to ``[fx, fy, cx, cy]`` by
    :meth:`from_init`).
    """

    name: ClassVar[str]
    N: ClassVar[int]
    PARAM_NAMES: ClassVar[Tuple[str, ...]]
    DEFAULT_DISTORTION: ClassVar[Tuple[float, ...]] = ()

    def __init__(self, params, dtype=np.float64):
        dtype = supported_dtype(dtype)
        self.params = as_vector(params, self.N, dtype=dtype, name=f"{self.name} parameters").copy()

    @property
    def dtype(self) -> np.dtype:
        return self.params.dtype

    @classmethod
    def from_init(cls, init, dtype=np.float64):
        """Build from [fx, fy, cx, cy] with neutral distortion parameters."""
        init = as_vector(init, 4, dtype=dtype, name="init")
        return cls(np.concatenate([init, np.asarray(cls.DEFAULT_DISTORTION, dtype=dtype)]), dtype=dtype)

    def __iadd__(self, delta):
        self.params += as_vector(delta, self.N, dtype=self.dtype, name="delta")
        return self

    def copy(self):
        return type(self)(self.params, dtype=self.dtype)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.dtype == other.dtype and np.array_equal(self.params, other.params)

    # Parameters change in place through +=
    __hash__ = None

    def __repr__(self) -> str:
        values = ", ".join(f"{n}={v:g}" for n, v in zip(self.PARAM_NAMES, self.params))
        return f"{type(self).__name__}({values})"

    def _as_point(self, p3d) -> np.ndarray:
        return as_vector(p3d, 4, dtype=self.dtype, name="p3d")

    def _as_pixel(self, proj) -> np.ndarray:
        return as_vector(proj, 2, dtype=self.dtype, name="proj")


def invalid_projection(dtype, n_params: int, jacobians: bool) -> ProjectionResult:
    """NaN-filled result for rays outside a model's domain."""
    nan = np.full(2, np.nan, dtype=dtype)
    if not jacobians:
        return ProjectionResult(nan, False)
    return ProjectionResult(
        nan, False,
        np.full((2, 4), np.nan, dtype=dtype),
        np.full((2, n_params), np.nan, dtype=dtype),
    )


def invalid_unprojection(dtype, n_params: int, jacobians: bool) -> UnprojectionResult:
    """NaN-filled result for pixels outside a model's domain."""
    nan = np.full(4, np.nan, dtype=dtype)
    if not jacobians:
        return UnprojectionResult(nan, False)
    return UnprojectionResult(
        nan, False,
        np.full((4, 2), np.nan, dtype=dtype),
        np.full((4, n_params), np.nan, dtype=dtype),
    )


def projection_from_normalized(
    params: np.ndarray,
    mx,
    my,
    d_m_d_p3d: Optional[np.ndarray] = None,
    d_m_d_dist: Optional[np.ndarray] = None
) -> ProjectionResult:
    """Apply [fx, fy, cx, cy] to normalized coordinates (mx, my).

    Args:
        params: Camera parameter vector, intrinsics first
        mx, my: Normalized image coordinates
        d_m_d_p3d: 2x4 derivative of (mx, my) w.r.t. the ray, or None
        d_m_d_dist: 2x(N-4) derivative of (mx, my) w.r.t. params[4:]

    Returns:
        Valid projection result, with Jacobians if d_m_d_p3d is given
    """
    fx, fy, cx, cy = params[:4]
    proj = np.array([fx * mx + cx, fy * my + cy], dtype=params.dtype)

    if d_m_d_p3d is None:
        return ProjectionResult(proj, True)

    focal = np.array([[fx], [fy]], dtype=params.dtype)

    d_proj_d_param = np.zeros((2, len(params)), dtype=params.dtype)
    d_proj_d_param[0, 0] = mx
    d_proj_d_param[0, 2] = 1
    d_proj_d_param[1, 1] = my
    d_proj_d_param[1, 3] = 1
    if d_m_d_dist is not None:
        d_proj_d_param[:, 4:] = focal * d_m_d_dist

    return ProjectionResult(proj, True, focal * d_m_d_p3d, d_proj_d_param)


def normalized_from_pixel(params: np.ndarray, proj: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Invert the intrinsic part: pixel -> normalized (mx, my)."""
    fx, fy, cx, cy = params[:4]
    return (proj[0] - cx) / fx, (proj[1] - cy) / fy


def unprojection_jacobians(
    params: np.ndarray,
    mx,
    my,
    d_p3d_d_m: np.ndarray,
    d_p3d_d_dist: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """Chain ray derivatives w.r.t. (mx, my) through the intrinsics.

    Args:
        params: Camera parameter vector, intrinsics first
        mx, my: Normalized image coordinates of the pixel
        d_p3d_d_m: 4x2 derivative of the ray w.r.t. (mx, my)
        d_p3d_d_dist: 4x(N-4) derivative w.r.t. params[4:] at fixed (mx, my)

    Returns:
        Tuple of (d_p3d_d_proj 4x2, d_p3d_d_param 4xN)
    """
    fx, fy = params[0], params[1]

    d_p3d_d_proj = np.empty((4, 2), dtype=params.dtype)
    d_p3d_d_proj[:, 0] = d_p3d_d_m[:, 0] / fx
    d_p3d_d_proj[:, 1] = d_p3d_d_m[:, 1] / fy

    d_p3d_d_param = np.zeros((4, len(params)), dtype=params.dtype)
    d_p3d_d_param[:, 0] = -mx * d_p3d_d_proj[:, 0]
    d_p3d_d_param[:, 1] = -my * d_p3d_d_proj[:, 1]
    d_p3d_d_param[:, 2] = -d_p3d_d_proj[:, 0]
    d_p3d_d_param[:, 3] = -d_p3d_d_proj[:, 1]
    if d_p3d_d_dist is not None:
        d_p3d_d_param[:, 4:] = d_p3d_d_dist

    return d_p3d_d_proj, d_p3d_d_param
