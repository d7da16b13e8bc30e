"""Unit tests for feature flag evaluation logic."""
import logging

import pytest

from app.config import Settings
from app.services.feature_flags import (
    ANALYTICS_EVENTS,
    FeatureFlag,
    FeatureFlagName,
    FeatureFlagStore,
    UnknownFeatureFlagError,
    _rolling_hash,
    default_flags,
)
from tests.conftest import make_flags


def _store(enabled=True, rollout=None, **kwargs):
    flag = FeatureFlag(name="homepage_v3", enabled=enabled, description="", rollout_percentage=rollout)
    return FeatureFlagStore({FeatureFlagName.HOMEPAGE_V3: flag}, **kwargs)


def test_flag_disabled_ignores_rollout():
    store = _store(enabled=False, rollout=100, random_fn=lambda: 0.0)
    assert all(store.is_enabled(FeatureFlagName.HOMEPAGE_V3) is False for _ in range(20))


def test_flag_rollout_full():
    store = _store(enabled=True, rollout=100, random_fn=lambda: 0.999)
    assert all(store.is_enabled("HOMEPAGE_V3") for _ in range(20))


def test_flag_without_rollout_is_on():
    assert _store(enabled=True, rollout=None).is_enabled(FeatureFlagName.HOMEPAGE_V3) is True


def test_partial_rollout_draws_per_call():
    draws = iter([0.10, 0.90, 0.10])
    store = _store(enabled=True, rollout=50, random_fn=lambda: next(draws))
    results = [store.is_enabled(FeatureFlagName.HOMEPAGE_V3, user_id="u1") for _ in range(3)]
    assert results == [True, False, True]


def test_zero_rollout_is_off():
    store = _store(enabled=True, rollout=0, random_fn=lambda: 0.0)
    assert store.is_enabled(FeatureFlagName.HOMEPAGE_V3) is False


def test_sticky_rollout_is_stable_per_user():
    store = _store(enabled=True, rollout=50, sticky_rollout=True, random_fn=lambda: pytest.fail("no draw"))
    first = store.is_enabled(FeatureFlagName.HOMEPAGE_V3, user_id="user-42")
    assert all(store.is_enabled(FeatureFlagName.HOMEPAGE_V3, user_id="user-42") == first for _ in range(10))


def test_unknown_flag_raises():
    with pytest.raises(UnknownFeatureFlagError):
        make_flags().get_flag("NOT_A_FLAG")


def test_enabled_features_ignores_rollout():
    store = FeatureFlagStore({
        FeatureFlagName.AI_ROUTER: FeatureFlag("ai_router", True, "", 0),
        FeatureFlagName.REBRAND_V1_0: FeatureFlag("rebrand_v1.0", False, "", 100),
    })
    assert store.enabled_features() == ["AI_ROUTER"]


def test_default_flags_from_environment():
    s = Settings(NODE_ENV="production", DATABASE_URL="sqlite://", NEXT_PUBLIC_AI_ROUTER=True,
                 NEXT_PUBLIC_HERO_COPY_ROLLOUT=25)
    flags = default_flags(s)
    assert flags[FeatureFlagName.AI_ROUTER].enabled is True
    assert flags[FeatureFlagName.REBRAND_V1_0].enabled is False
    assert flags[FeatureFlagName.HERO_COPY_VARIANT].rollout_percentage == 25
    assert flags[FeatureFlagName.HOMEPAGE_V3].rollout_percentage == 100


def test_development_enables_every_flag():
    s = Settings(NODE_ENV="development", DATABASE_URL="sqlite://")
    assert all(flag.enabled for flag in default_flags(s).values())


def test_rolling_hash_wraps_to_int32():
    assert _rolling_hash("a") == 97
    assert _rolling_hash("ab") == 97 * 31 + 98
    h = _rolling_hash("x" * 50)
    assert -2**31 <= h < 2**31


def test_ab_variant_deterministic_for_user():
    store = make_flags()
    first = store.ab_test_variant("hero_copy", "user-123")
    assert all(store.ab_test_variant("hero_copy", "user-123") == first for _ in range(20))
    # "1" -> 49 -> A, "a" -> 97 -> B
    assert store.ab_test_variant("hero_copy", "1") == "A"
    assert store.ab_test_variant("hero_copy", "a") == "B"


def test_ab_variant_unknown_test_is_a():
    store = make_flags()
    assert store.ab_test_variant("unknown_test", "a") == "A"
    assert store.ab_test_variant("unknown_test") == "A"


def test_track_event_forwards_to_hook(caplog):
    received = []
    store = make_flags(analytics_hook=lambda event, payload: received.append((event, payload)))
    with caplog.at_level(logging.INFO, logger="devflowhub.analytics"):
        store.track_event(ANALYTICS_EVENTS["HOMEPAGE_CTA_START_TRIAL"], {"plan": "pro"}, user_id="u1")

    assert received[0][0] == "Homepage_CTA_StartTrial"
    assert received[0][1]["properties"] == {"plan": "pro"}
    assert "Homepage_CTA_StartTrial" in caplog.text


def test_track_event_swallows_hook_errors():
    def boom(event, payload):
        raise RuntimeError("analytics down")

    store = make_flags(analytics_hook=boom)
    store.track_event("Hero_Variant_A_View")  # must not raise


def test_store_from_settings_wires_options():
    s = Settings(NODE_ENV="production", DATABASE_URL="sqlite://", FEATURE_FLAG_STICKY_ROLLOUT=True,
                 ANALYTICS_WEBHOOK_URL="http://analytics.local/events")
    store = FeatureFlagStore.from_settings(s)
    assert store.sticky_rollout is True
    assert store.analytics_hook is not None
    assert store.is_enabled(FeatureFlagName.AI_ROUTER) is False

    assert FeatureFlagStore.from_settings(Settings(DATABASE_URL="sqlite://")).analytics_hook is None


def test_rolling_hash_uses_utf16_code_units():
    # U+1F600 is the surrogate pair D83D DE00
    assert _rolling_hash("\U0001F600") == 0xD83D * 31 + 0xDE00
    assert _rolling_hash("é") == 0xE9
