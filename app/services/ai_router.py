"""
DevFlowHub AI Router

Single entrypoint for assistant requests: picks exactly one module for the
request, hands it to that module's handler and records provenance (module +
underlying provider) on the response.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

from app.schemas.ai import AIRequest, AIRequestType, AIResponse, ModuleCapabilities
from app.services.ai_providers import ModuleHandler, echo_handlers
from app.services.feature_flags import FeatureFlagName, FeatureFlagStore
from app.services.module_mapping import DevFlowHubModule, ModuleMappingTable

logger = logging.getLogger(__name__)


def default_capabilities() -> Dict[DevFlowHubModule, ModuleCapabilities]:
    return {
        DevFlowHubModule.EDITOR: ModuleCapabilities(
            code_completion=True, code_explanation=True, general=True,
        ),
        DevFlowHubModule.SANDBOX: ModuleCapabilities(
            code_completion=True, code_explanation=True, general=True,
        ),
        DevFlowHubModule.UI_STUDIO: ModuleCapabilities(ui_generation=True, general=True),
        DevFlowHubModule.DEPLOYER: ModuleCapabilities(deployment_help=True, general=True),
    }


_TYPE_ROUTES = {
    AIRequestType.CODE_COMPLETION: DevFlowHubModule.EDITOR,
    AIRequestType.CODE_EXPLANATION: DevFlowHubModule.EDITOR,
    AIRequestType.UI_GENERATION: DevFlowHubModule.UI_STUDIO,
    AIRequestType.DEPLOYMENT_HELP: DevFlowHubModule.DEPLOYER,
}


class AIRouter:
    """Capability-based dispatcher over the four module handlers."""

    def __init__(
        self,
        flags: FeatureFlagStore,
        mappings: ModuleMappingTable,
        handlers: Optional[Mapping[DevFlowHubModule, ModuleHandler]] = None,
        capabilities: Optional[Mapping[DevFlowHubModule, ModuleCapabilities]] = None,
    ):
        self.flags = flags
        self.mappings = mappings
        self.handlers: Dict[DevFlowHubModule, ModuleHandler] = dict(handlers or echo_handlers())
        self._capabilities: Dict[DevFlowHubModule, ModuleCapabilities] = dict(
            capabilities or default_capabilities()
        )

    async def route_request(self, request: AIRequest) -> AIResponse:
        if not self.flags.is_enabled(FeatureFlagName.AI_ROUTER, user_id=request.user_id):
            return await self._legacy_route(request)

        try:
            target = self.determine_target_module(request)
            mapping = self.mappings.get_mapping_by_module(target)
            content = await self._route_to_module(target, request)
        except Exception as e:
            logger.warning("AI routing failed for %s request: %s", _type_value(request.type), e, exc_info=True)
            ctx_module = request.context.module if request.context else None
            return AIResponse(
                success=False,
                content="",
                module=_module_value(ctx_module) if ctx_module else DevFlowHubModule.EDITOR.value,
                provider="fallback",
                error=str(e) or e.__class__.__name__,
            )

        logger.info(
            "Routed %s request to %s (provider=%s)",
            _type_value(request.type), target.value, mapping.provider.value,
        )
        return AIResponse(
            success=True,
            content=content,
            module=target.value,
            provider=mapping.provider.value,
            metadata={
                "routed_at": datetime.now(timezone.utc).isoformat(),
                "request_type": _type_value(request.type),
                "module_capabilities": self._capabilities[target].model_dump(),
            },
        )

    def determine_target_module(self, request: AIRequest) -> DevFlowHubModule:
        """Context module wins when it can handle the type; otherwise route by type."""
        ctx_module = request.context.module if request.context else None
        if ctx_module:
            module = DevFlowHubModule(ctx_module)
            if self._capabilities[module].supports(request.type):
                return module

        try:
            return _TYPE_ROUTES[AIRequestType(request.type)]
        except (KeyError, ValueError):
            # general or unrecognised type
            return DevFlowHubModule(ctx_module) if ctx_module else DevFlowHubModule.EDITOR

    async def _route_to_module(self, module: DevFlowHubModule, request: AIRequest) -> str:
        handler = self.handlers.get(module)
        if handler is None:
            raise ValueError(f"Unknown module: {module.value}")
        return await handler(request)

    async def _legacy_route(self, request: AIRequest) -> AIResponse:
        return AIResponse(
            success=True,
            content=f"Legacy AI response for: {request.content}",
            module=DevFlowHubModule.EDITOR.value,
            provider="cursor",
        )

    def get_module_capabilities(self, module: DevFlowHubModule | str) -> ModuleCapabilities:
        return self._capabilities[DevFlowHubModule(module)]

    def update_module_capabilities(self, module: DevFlowHubModule | str, **changes: bool) -> ModuleCapabilities:
        """Shallow-merge ``changes`` into the module's capabilities.

        The merged record is re-validated, so non-boolean values raise
        ``pydantic.ValidationError`` and the stored record is left untouched.
        """
        module = DevFlowHubModule(module)
        updated = ModuleCapabilities.model_validate({**self._capabilities[module].model_dump(), **changes})
        self._capabilities[module] = updated
        logger.info("Capabilities for %s updated: %s", module.value, changes)
        return updated


def _type_value(request_type) -> str:
    return getattr(request_type, "value", str(request_type))


def _module_value(module) -> str:
    return getattr(module, "value", str(module))
