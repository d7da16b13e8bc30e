"""Feature flag evaluation, A/B variant assignment and analytics events."""
import hashlib
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)
analytics_logger = logging.getLogger("devflowhub.analytics")

AnalyticsHook = Callable[[str, Dict[str, Any]], None]


class FeatureFlagName(str, Enum):
    REBRAND_V1_0 = "REBRAND_V1_0"
    AI_ROUTER = "AI_ROUTER"
    HOMEPAGE_V3 = "HOMEPAGE_V3"
    HERO_COPY_VARIANT = "HERO_COPY_VARIANT"


class UnknownFeatureFlagError(KeyError):
    pass


@dataclass(frozen=True)
class FeatureFlag:
    name: str
    enabled: bool
    description: str
    rollout_percentage: Optional[int] = None


@dataclass(frozen=True)
class ABTestVariant:
    id: str
    name: str
    weight: int


HERO_COPY_VARIANTS: Mapping[str, ABTestVariant] = MappingProxyType({
    "A": ABTestVariant(id="A", name="Build the future. Ship with AI.", weight=50),
    "B": ABTestVariant(id="B", name="Ship faster with an AI Development OS", weight=50),
})

ANALYTICS_EVENTS: Mapping[str, str] = MappingProxyType({
    "HOMEPAGE_V3_LAUNCH": "Homepage_v3_Launch",
    "HOMEPAGE_CTA_START_TRIAL": "Homepage_CTA_StartTrial",
    "HOMEPAGE_CTA_BOOK_DEMO": "Homepage_CTA_BookDemo",
    "HOMEPAGE_LINK_EXPLORE_WORKSPACE": "Homepage_Link_ExploreWorkspace",
    "HERO_VARIANT_A_VIEW": "Hero_Variant_A_View",
    "HERO_VARIANT_B_VIEW": "Hero_Variant_B_View",
})


def default_flags(settings: Settings) -> Dict[FeatureFlagName, FeatureFlag]:
    """Build the flag table from environment switches.

    A flag is on when its ``NEXT_PUBLIC_*`` switch is true or the process runs
    in development.
    """
    dev = settings.is_development
    return {
        FeatureFlagName.REBRAND_V1_0: FeatureFlag(
            name="rebrand_v1.0",
            enabled=settings.NEXT_PUBLIC_REBRAND_V1_0 or dev,
            description="Enable DevFlowHub module rebranding (Editor, Sandbox, UI Studio, Deployer)",
            rollout_percentage=100,
        ),
        FeatureFlagName.AI_ROUTER: FeatureFlag(
            name="ai_router",
            enabled=settings.NEXT_PUBLIC_AI_ROUTER or dev,
            description="Enable unified AI Router service for module routing",
            rollout_percentage=100,
        ),
        FeatureFlagName.HOMEPAGE_V3: FeatureFlag(
            name="homepage_v3",
            enabled=settings.NEXT_PUBLIC_HOMEPAGE_V3 or dev,
            description="Enable Homepage v3.0 with new design and A/B testing",
            rollout_percentage=settings.NEXT_PUBLIC_HOMEPAGE_V3_ROLLOUT,
        ),
        FeatureFlagName.HERO_COPY_VARIANT: FeatureFlag(
            name="hero_copy_variant",
            enabled=settings.NEXT_PUBLIC_HERO_COPY_VARIANT or dev,
            description="Enable Hero copy A/B testing (A vs B variants)",
            rollout_percentage=settings.NEXT_PUBLIC_HERO_COPY_ROLLOUT,
        ),
    }


def _user_bucket(user_id: str, flag_name: str) -> int:
    """Deterministic 0-99 bucket based on user_id + flag name."""
    h = hashlib.sha256(f"{user_id}:{flag_name}".encode()).hexdigest()
    return int(h[:8], 16) % 100


def _rolling_hash(seed: str) -> int:
    """31-multiplier string hash wrapped to a signed 32-bit integer.

    Hashes UTF-16 code units, so ids outside the BMP (emoji etc.) land in
    the same bucket the web client computes.
    """
    encoded = seed.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        unit = int.from_bytes(encoded[i:i + 2], "little")
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def webhook_analytics_hook(url: str, timeout: float = 2.0) -> AnalyticsHook:
    """Analytics hook posting each event as JSON to ``url``."""

    def _send(event: str, payload: Dict[str, Any]) -> None:
        response = httpx.post(url, json={"event": event, **payload}, timeout=timeout)
        response.raise_for_status()

    return _send


class FeatureFlagStore:
    """Read-only flag table plus evaluation helpers.

    Built once at startup (see ``app.api.deps``); tests build their own
    instances with alternate tables instead of touching the environment.
    """

    def __init__(
        self,
        flags: Mapping[FeatureFlagName, FeatureFlag],
        *,
        sticky_rollout: bool = False,
        analytics_hook: Optional[AnalyticsHook] = None,
        random_fn: Callable[[], float] = random.random,
    ):
        self._flags = MappingProxyType(dict(flags))
        self.sticky_rollout = sticky_rollout
        self.analytics_hook = analytics_hook
        self._random = random_fn

    @classmethod
    def from_settings(cls, settings: Settings) -> "FeatureFlagStore":
        hook = None
        if settings.ANALYTICS_WEBHOOK_URL:
            hook = webhook_analytics_hook(
                settings.ANALYTICS_WEBHOOK_URL, settings.ANALYTICS_TIMEOUT_SECONDS
            )
        return cls(
            default_flags(settings),
            sticky_rollout=settings.FEATURE_FLAG_STICKY_ROLLOUT,
            analytics_hook=hook,
        )

    @property
    def flags(self) -> Mapping[FeatureFlagName, FeatureFlag]:
        return self._flags

    def get_flag(self, name: FeatureFlagName | str) -> FeatureFlag:
        try:
            return self._flags[FeatureFlagName(name)]
        except (ValueError, KeyError):
            raise UnknownFeatureFlagError(f"Unknown feature flag: {name}") from None

    def is_enabled(self, name: FeatureFlagName | str, user_id: Optional[str] = None) -> bool:
        """Evaluate whether a flag is active for this call.

        Partial rollouts draw a fresh random number per call, so the same user
        may get different answers across calls. With ``sticky_rollout`` and a
        ``user_id`` the draw is replaced by a stable per-user bucket.
        """
        flag = self.get_flag(name)
        if not flag.enabled:
            return False

        pct = flag.rollout_percentage
        if pct is None or pct >= 100:
            return True

        if self.sticky_rollout and user_id:
            return _user_bucket(user_id, flag.name) < pct
        return self._random() * 100 < pct

    def enabled_features(self) -> List[str]:
        return [name.value for name, flag in self._flags.items() if flag.enabled]

    def ab_test_variant(self, test_name: str, user_id: Optional[str] = None) -> str:
        """Assign a user to variant ``A`` or ``B``.

        Sticky for a given ``user_id``; anonymous callers get a random seed.
        Only ``hero_copy`` is a known test, everything else gets ``A``.
        """
        seed = user_id if user_id else str(self._random())
        bucket = abs(_rolling_hash(seed)) % 100

        if test_name == "hero_copy":
            return "A" if bucket < 50 else "B"
        return "A"

    def track_event(
        self,
        event: str,
        properties: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> None:
        """Fire-and-forget analytics event. Never raises."""
        payload = {
            "properties": properties or {},
            "user_id": user_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        analytics_logger.info("Analytics event: %s", event, extra={"event": event, **payload})

        if self.analytics_hook is None:
            return
        try:
            self.analytics_hook(event, payload)
        except Exception:
            analytics_logger.warning("Analytics hook failed for %s", event, exc_info=True)
