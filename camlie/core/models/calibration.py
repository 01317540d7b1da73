"""Camera calibration configuration model."""

import logging
import math
from typing import List, Literal

import numpy as np
from pydantic import BaseModel, Field, field_validator, model_validator

from ..cameras.generic import CAMERA_TYPES, GenericCamera, create_camera

logger = logging.getLogger(__name__)

CameraType = Literal["pinhole", "ucm", "eucm", "kb4", "ds", "fov"]


class CameraCalibration(BaseModel):
    """Intrinsic calibration of one camera.

    Only the shape of the parameter vector is validated. Whether the values
    keep a model's denominators away from zero is left to the caller.
    """

    camera_type: CameraType = Field(description="Camera model short name")
    intrinsics: List[float] = Field(
        description="Full parameter vector [fx, fy, cx, cy, distortion...]",
        min_length=4,
    )
    dtype: Literal["float64", "float32"] = Field(
        default="float64",
        description="Floating point precision to evaluate the model in"
    )

    @field_validator('intrinsics')
    @classmethod
    def validate_intrinsics(cls, v):
        if not all(math.isfinite(x) for x in v):
            raise ValueError("intrinsics must be finite")
        return v

    @model_validator(mode='after')
    def validate_parameter_count(self):
        expected = CAMERA_TYPES[self.camera_type].N
        if len(self.intrinsics) != expected:
            raise ValueError(
                f"{self.camera_type} expects {expected} intrinsics, got {len(self.intrinsics)}"
            )
        return self

    def get_focal_length(self) -> tuple[float, float]:
        """Get focal lengths (fx, fy)."""
        return self.intrinsics[0], self.intrinsics[1]

    def get_principal_point(self) -> tuple[float, float]:
        """Get principal point (cx, cy)."""
        return self.intrinsics[2], self.intrinsics[3]

    def get_distortion(self) -> List[float]:
        """Get the model specific parameters after the pinhole part."""
        return self.intrinsics[4:]

    def to_camera(self) -> GenericCamera:
        """Instantiate the camera model this calibration describes."""
        logger.debug("Building %s camera from calibration", self.camera_type)
        return create_camera(self.camera_type, self.intrinsics, dtype=np.dtype(self.dtype))

    @classmethod
    def from_camera(cls, camera: GenericCamera) -> "CameraCalibration":
        """Capture the current parameters of a camera instance."""
        return cls(
            camera_type=camera.name,
            intrinsics=camera.params.astype(np.float64).tolist(),
            dtype=camera.dtype.name,
        )
