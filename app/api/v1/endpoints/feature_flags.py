"""Feature flag API.

Endpoints:
- GET  /feature-flags                        → list all flags
- GET  /feature-flags/enabled                → names of statically enabled flags
- GET  /feature-flags/{key}/evaluate         → evaluate for the calling user
- GET  /feature-flags/ab-tests/{test_name}   → A/B variant for the calling user
- POST /feature-flags/events                 → track an analytics event
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException

from app.api import deps
from app.schemas.feature_flag import (
    ABTestAssignment,
    AnalyticsEventIn,
    EnabledFeatures,
    FeatureFlag,
    FeatureFlagEvaluation,
)
from app.services.feature_flags import (
    HERO_COPY_VARIANTS,
    FeatureFlagStore,
    UnknownFeatureFlagError,
)

router = APIRouter()


@router.get("/", response_model=List[FeatureFlag])
def list_feature_flags(
    flags: FeatureFlagStore = Depends(deps.get_feature_flags),
) -> Any:
    return [
        FeatureFlag(
            key=key.value,
            name=flag.name,
            enabled=flag.enabled,
            description=flag.description,
            rollout_percentage=flag.rollout_percentage,
        )
        for key, flag in flags.flags.items()
    ]


@router.get("/enabled", response_model=EnabledFeatures)
def list_enabled_features(
    flags: FeatureFlagStore = Depends(deps.get_feature_flags),
) -> Any:
    return EnabledFeatures(features=flags.enabled_features())


@router.get("/ab-tests/{test_name}", response_model=ABTestAssignment)
def get_ab_test_variant(
    test_name: str,
    flags: FeatureFlagStore = Depends(deps.get_feature_flags),
    user_id: Optional[str] = Depends(deps.get_current_user_id),
) -> Any:
    variant = flags.ab_test_variant(test_name, user_id)
    copy_text = HERO_COPY_VARIANTS[variant].name if test_name == "hero_copy" else None
    return ABTestAssignment(test_name=test_name, variant=variant, copy_text=copy_text)


@router.post("/events", status_code=202)
def track_event(
    body: AnalyticsEventIn,
    flags: FeatureFlagStore = Depends(deps.get_feature_flags),
    user_id: Optional[str] = Depends(deps.get_current_user_id),
) -> Any:
    flags.track_event(body.event, body.properties, user_id=user_id)
    return {"ok": True}


@router.get("/{key}/evaluate", response_model=FeatureFlagEvaluation)
def evaluate_feature_flag(
    key: str,
    flags: FeatureFlagStore = Depends(deps.get_feature_flags),
    user_id: Optional[str] = Depends(deps.get_current_user_id),
) -> Any:
    try:
        enabled = flags.is_enabled(key.upper(), user_id=user_id)
    except UnknownFeatureFlagError:
        raise HTTPException(status_code=404, detail="Flag not found")
    return FeatureFlagEvaluation(key=key.upper(), enabled=enabled)
