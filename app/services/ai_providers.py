"""
Module AI handlers

The router only decides *which* module answers; the text itself comes from a
handler per module. ``echo_handlers`` are the placeholder handlers used when
no provider is configured; ``OpenAIModuleHandler`` calls the chat completions
API with a module-specific system prompt.
"""
import logging
from typing import Awaitable, Callable, Dict

import openai
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.config import Settings
from app.schemas.ai import AIRequest
from app.services.module_mapping import DevFlowHubModule, ModuleMapping

logger = logging.getLogger(__name__)

ModuleHandler = Callable[[AIRequest], Awaitable[str]]

_ECHO_LABELS = {
    DevFlowHubModule.EDITOR: "Editor",
    DevFlowHubModule.SANDBOX: "Sandbox",
    DevFlowHubModule.UI_STUDIO: "UI Studio",
    DevFlowHubModule.DEPLOYER: "Deployer",
}


def _echo_handler(label: str) -> ModuleHandler:
    async def handle(request: AIRequest) -> str:
        return f"{label} AI response for: {request.content}"

    handle.__name__ = f"handle_{label.lower().replace(' ', '_')}_request"
    return handle


def echo_handlers() -> Dict[DevFlowHubModule, ModuleHandler]:
    return {module: _echo_handler(label) for module, label in _ECHO_LABELS.items()}


class OpenAIModuleHandler:
    """Answers a routed request with OpenAI, framed as one DevFlowHub module."""

    SYSTEM_PROMPT = """You are the AI assistant of {module_name}, part of DevFlowHub.

Available modules (UI-branded):
- DevFlowHub Sandbox (provider: Replit): running/testing code, terminal operations
- DevFlowHub Editor (provider: Cursor): code editing, file management, refactoring
- DevFlowHub UI Studio (provider: v0): UI component generation, design
- DevFlowHub Deployer (provider: Bolt): deployment, environment management

You are answering as {module_name}: {description}.
Project language: {language}
Project framework: {framework}

Answer concisely. When returning code, use fenced code blocks."""

    def __init__(self, mapping: ModuleMapping, client: "openai.AsyncOpenAI", settings: Settings):
        self.mapping = mapping
        self.client = client
        self.model = settings.OPENAI_MODEL
        self.temperature = settings.OPENAI_TEMPERATURE
        self.max_tokens = settings.OPENAI_MAX_TOKENS

    def _system_prompt(self, request: AIRequest) -> str:
        ctx = request.context
        return self.SYSTEM_PROMPT.format(
            module_name=self.mapping.module_name,
            description=self.mapping.description,
            language=(ctx.language if ctx and ctx.language else "unknown"),
            framework=(ctx.framework if ctx and ctx.framework else "none"),
        )

    @retry(
        retry=retry_if_exception_type((openai.APIConnectionError, openai.RateLimitError)),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def __call__(self, request: AIRequest) -> str:
        completion = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self._system_prompt(request)},
                {"role": "user", "content": request.content},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        content = completion.choices[0].message.content if completion.choices else None
        usage = getattr(completion, "usage", None)
        logger.info(
            "OpenAI answered for %s (%s tokens)",
            self.mapping.module.value,
            getattr(usage, "total_tokens", 0),
        )
        return content or "No response from AI"


def build_module_handlers(settings: Settings, mappings) -> Dict[DevFlowHubModule, ModuleHandler]:
    """OpenAI handlers when an API key is configured, echo handlers otherwise."""
    if not settings.OPENAI_API_KEY:
        return echo_handlers()
    client = openai.AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
    return {
        mapping.module: OpenAIModuleHandler(mapping, client, settings)
        for mapping in mappings.all_mappings()
    }
