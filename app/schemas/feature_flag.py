"""Feature Flag schemas."""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


class FeatureFlag(BaseModel):
    key: str
    name: str
    enabled: bool
    description: str = ""
    rollout_percentage: Optional[int] = None


class FeatureFlagEvaluation(BaseModel):
    key: str
    enabled: bool


class EnabledFeatures(BaseModel):
    features: List[str]


class ABTestAssignment(BaseModel):
    test_name: str
    variant: Literal["A", "B"]
    copy_text: Optional[str] = None


class AnalyticsEventIn(BaseModel):
    event: str = Field(..., min_length=1)
    properties: Dict[str, Any] = Field(default_factory=dict)
