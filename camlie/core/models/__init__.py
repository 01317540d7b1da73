"""Data models for camlie."""

from .calibration import CameraCalibration, CameraType

__all__ = [
    "CameraCalibration",
    "CameraType",
]
