import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, model_validator


class DetectionParams(BaseModel):
    """
    Thresholds for the shape-detection engine.

    Immutable once built. Out-of-range values raise ``pydantic.ValidationError``
    at construction, never during an analysis.
    """

    model_config = ConfigDict(frozen=True)

    # grouping
    proximity_distance: float = Field(10.0, ge=0.0)
    temporal_window_ms: float = Field(200.0, ge=0.0)

    # corners
    corner_angle_threshold: float = Field(45.0, gt=0.0, lt=180.0)
    corner_window: int = Field(3, ge=1)
    resample_points: int = Field(128, ge=8)

    # ratio acceptance
    circularity_threshold: float = Field(0.80, ge=0.0, le=1.0)
    straightness_threshold: float = Field(0.70, ge=0.0, le=1.0)
    closedness_threshold: float = Field(0.15, ge=0.0, le=1.0)

    # classification
    edge_angle_tolerance: float = Field(20.0, ge=0.0, le=45.0)
    circle_max_corners: int = Field(1, ge=0)
    arrow_head_corners: int = Field(2, ge=1)
    end_zone: float = Field(0.2, gt=0.0, le=0.5)

    # connectors
    connector_margin: float = Field(30.0, ge=0.0)

    @model_validator(mode="after")
    def check_corner_window(self) -> "DetectionParams":
        # an open path needs at least one sample with a full window on both sides
        if 2 * self.corner_window >= self.resample_points:
            raise ValueError("corner_window must be less than half of resample_points")
        return self


class SketchforgeConfig:
    """
    Central configuration object.

    Detection thresholds come from explicit keyword overrides first, then from
    ``SKETCHFORGE_<FIELD>`` environment variables (a ``.env`` file is loaded if
    present), then from the ``DetectionParams`` defaults.
    """

    ENV_PREFIX = "SKETCHFORGE_"

    def __init__(
        self,
        detection_overrides: Optional[Dict[str, Any]] = None,
        canvas_width=1920,
        canvas_height=1080,
        load_env=True,
    ):
        if load_env:
            load_dotenv()
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        values = self._env_overrides()
        values.update(detection_overrides or {})
        self.detection = DetectionParams(**values)

    @classmethod
    def _env_overrides(cls) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        for name in DetectionParams.model_fields:
            raw = os.getenv(cls.ENV_PREFIX + name.upper())
            if raw is not None and raw.strip() != "":
                overrides[name] = raw.strip()
        return overrides
