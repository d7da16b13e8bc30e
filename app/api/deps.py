"""Dependency providers: DB session plus the process-wide service singletons.

Flag and mapping tables are built once here (the composition root) and
injected into endpoints; tests replace them via ``dependency_overrides``.
"""
import secrets
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException

from app.config import settings
from app.db.session import get_db  # noqa: F401  (re-exported for endpoints / tests)
from app.services.ai_providers import build_module_handlers
from app.services.ai_router import AIRouter
from app.services.feature_flags import FeatureFlagStore
from app.services.module_mapping import ModuleMappingTable, NamingStrategy, naming_strategy


@lru_cache
def get_feature_flags() -> FeatureFlagStore:
    return FeatureFlagStore.from_settings(settings)


@lru_cache
def get_module_table() -> ModuleMappingTable:
    return ModuleMappingTable()


@lru_cache
def get_ai_router() -> AIRouter:
    table = get_module_table()
    return AIRouter(
        flags=get_feature_flags(),
        mappings=table,
        handlers=build_module_handlers(settings, table),
    )


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Session handling lives in the web tier; it forwards the user id as a header."""
    return x_user_id


def get_naming(
    flags: FeatureFlagStore = Depends(get_feature_flags),
    table: ModuleMappingTable = Depends(get_module_table),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> NamingStrategy:
    return naming_strategy(flags, table, user_id=user_id)


def require_admin_token(x_admin_token: Optional[str] = Header(default=None)) -> None:
    """Guard for operator-only endpoints that mutate process-wide state."""
    expected = settings.ADMIN_API_TOKEN
    if not expected or not x_admin_token or not secrets.compare_digest(x_admin_token, expected):
        raise HTTPException(status_code=403, detail="Admin token required")
