"""AI router: module selection, provenance and failure handling."""
from datetime import datetime

import pytest

from app.schemas.ai import AIRequest, AIRequestContext, AIRequestType
from app.services.ai_router import AIRouter
from app.services.feature_flags import FeatureFlagName
from app.services.module_mapping import DevFlowHubModule, ModuleMappingTable
from tests.conftest import make_flags


@pytest.fixture
def ai_router():
    return AIRouter(flags=make_flags(enabled=True), mappings=ModuleMappingTable())


def _request(type_, content="hello", module=None, user_id="user-1"):
    context = AIRequestContext(project_id="p1", module=module) if module else None
    return AIRequest(type=type_, content=content, context=context, user_id=user_id)


async def test_ui_generation_routes_to_ui_studio(ai_router):
    response = await ai_router.route_request(_request(AIRequestType.UI_GENERATION, "a navbar"))
    assert response.success is True
    assert response.module == "ui_studio"
    assert response.provider == "v0"
    assert response.content == "UI Studio AI response for: a navbar"


async def test_context_module_without_capability_falls_back(ai_router):
    response = await ai_router.route_request(
        _request(AIRequestType.CODE_COMPLETION, module=DevFlowHubModule.DEPLOYER)
    )
    assert response.module == "editor"
    assert response.provider == "cursor"


async def test_context_module_with_capability_wins(ai_router):
    response = await ai_router.route_request(
        _request(AIRequestType.CODE_EXPLANATION, module=DevFlowHubModule.SANDBOX)
    )
    assert response.module == "sandbox"
    assert response.provider == "replit"
    assert response.content.startswith("Sandbox AI response for:")


@pytest.mark.parametrize("type_,expected", [
    (AIRequestType.CODE_COMPLETION, "editor"),
    (AIRequestType.CODE_EXPLANATION, "editor"),
    (AIRequestType.DEPLOYMENT_HELP, "deployer"),
    (AIRequestType.GENERAL, "editor"),
])
async def test_type_routes_without_context(ai_router, type_, expected):
    response = await ai_router.route_request(_request(type_))
    assert response.module == expected


async def test_general_request_keeps_context_module(ai_router):
    response = await ai_router.route_request(
        _request(AIRequestType.GENERAL, module=DevFlowHubModule.DEPLOYER)
    )
    assert response.module == "deployer"
    assert response.provider == "bolt"


async def test_metadata_records_routing(ai_router):
    response = await ai_router.route_request(_request(AIRequestType.DEPLOYMENT_HELP))
    assert response.metadata["request_type"] == "deployment_help"
    assert response.metadata["module_capabilities"]["deployment_help"] is True
    datetime.fromisoformat(response.metadata["routed_at"])


async def test_router_flag_off_uses_legacy_route():
    router = AIRouter(flags=make_flags(enabled=False), mappings=ModuleMappingTable())
    for type_ in AIRequestType:
        response = await router.route_request(_request(type_, content="x"))
        assert response.success is True
        assert response.module == "editor"
        assert response.provider == "cursor"
        assert response.content == "Legacy AI response for: x"


async def test_handler_failure_returns_structured_error():
    async def broken(request):
        raise RuntimeError("provider unavailable")

    router = AIRouter(
        flags=make_flags(enabled=True),
        mappings=ModuleMappingTable(),
        handlers={module: broken for module in DevFlowHubModule},
    )
    response = await router.route_request(_request(AIRequestType.UI_GENERATION, module=DevFlowHubModule.SANDBOX))
    assert response.success is False
    assert response.error == "provider unavailable"
    assert response.module == "sandbox"
    assert response.provider == "fallback"
    assert response.content == ""


async def test_missing_handler_defaults_error_module_to_editor():
    router = AIRouter(flags=make_flags(enabled=True), mappings=ModuleMappingTable())
    del router.handlers[DevFlowHubModule.UI_STUDIO]
    response = await router.route_request(_request(AIRequestType.UI_GENERATION))
    assert response.success is False
    assert response.module == "editor"
    assert "Unknown module: ui_studio" in response.error


async def test_injected_handler_receives_request():
    seen = []

    async def editor(request):
        seen.append(request)
        return "completed code"

    router = AIRouter(
        flags=make_flags(enabled=True),
        mappings=ModuleMappingTable(),
        handlers={DevFlowHubModule.EDITOR: editor},
    )
    response = await router.route_request(_request(AIRequestType.CODE_COMPLETION, content="def f("))
    assert response.content == "completed code"
    assert seen[0].content == "def f("


async def test_update_capabilities_changes_routing(ai_router):
    updated = ai_router.update_module_capabilities("deployer", code_completion=True)
    assert updated.code_completion is True
    assert updated.deployment_help is True  # shallow merge keeps the rest

    response = await ai_router.route_request(
        _request(AIRequestType.CODE_COMPLETION, module=DevFlowHubModule.DEPLOYER)
    )
    assert response.module == "deployer"


def test_update_capabilities_allows_all_false(ai_router):
    caps = ai_router.update_module_capabilities(
        DevFlowHubModule.EDITOR,
        code_completion=False, code_explanation=False, general=False,
    )
    assert not any(caps.model_dump().values())
    assert ai_router.get_module_capabilities("editor") == caps


async def test_router_evaluates_flag_with_user_id():
    calls = []

    class RecordingFlags:
        def is_enabled(self, name, user_id=None):
            calls.append((name, user_id))
            return True

    router = AIRouter(flags=RecordingFlags(), mappings=ModuleMappingTable())
    await router.route_request(_request(AIRequestType.GENERAL, user_id="u-9"))
    assert calls == [(FeatureFlagName.AI_ROUTER, "u-9")]


async def test_openai_handler_sends_module_prompt():
    from types import SimpleNamespace

    from app.config import Settings
    from app.services.ai_providers import OpenAIModuleHandler, build_module_handlers

    sent = {}

    async def create(**kwargs):
        sent.update(kwargs)
        message = SimpleNamespace(content="use a flexbox")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None)

    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    settings = Settings(DATABASE_URL="sqlite://", OPENAI_API_KEY="sk-test")
    table = ModuleMappingTable()
    handler = OpenAIModuleHandler(table.get_mapping_by_module("ui_studio"), client, settings)

    request = AIRequest(
        type=AIRequestType.UI_GENERATION,
        content="center a div",
        context=AIRequestContext(framework="react"),
    )
    assert await handler(request) == "use a flexbox"
    assert sent["model"] == settings.OPENAI_MODEL
    assert "You are answering as DevFlowHub UI Studio" in sent["messages"][0]["content"]
    assert "Project framework: react" in sent["messages"][0]["content"]
    assert sent["messages"][1] == {"role": "user", "content": "center a div"}

    handlers = build_module_handlers(settings, table)
    assert all(isinstance(h, OpenAIModuleHandler) for h in handlers.values())


def test_update_capabilities_rejects_non_bool(ai_router):
    from pydantic import ValidationError

    before = ai_router.get_module_capabilities("sandbox")
    with pytest.raises(ValidationError):
        ai_router.update_module_capabilities("sandbox", general=None)
    assert ai_router.get_module_capabilities("sandbox") == before
