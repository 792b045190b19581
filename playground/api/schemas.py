"""Response models for the playground HTTP API."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class PredictionResponse(BaseModel):
    """Successful `POST /api/predictions` response."""

    elapsed_seconds: float = Field(..., description="Seconds from creation to terminal status")
    prediction: Dict[str, Any] = Field(..., description="Final provider prediction document")
    image_url: Optional[str] = Field(
        default=None, description="First usable image reference, if any"
    )


class RefineResponse(BaseModel):
    """Successful `POST /api/refine` response."""

    refined_prompt: str = Field(..., description="Refined prompt, or the original prompt")
    elapsed_seconds: float
    prediction: Dict[str, Any]


class HealthResponse(BaseModel):
    status: str = "ok"
    models: Dict[str, bool] = Field(
        default_factory=dict, description="Whether each model has a configured version"
    )
    refine: bool = False
