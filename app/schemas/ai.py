"""AI router request / response schemas."""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from app.services.module_mapping import DevFlowHubModule


class AIRequestType(str, Enum):
    CODE_COMPLETION = "code_completion"
    CODE_EXPLANATION = "code_explanation"
    UI_GENERATION = "ui_generation"
    DEPLOYMENT_HELP = "deployment_help"
    GENERAL = "general"


class AIRequestContext(BaseModel):
    project_id: Optional[str] = None
    module: Optional[DevFlowHubModule] = None
    provider: Optional[str] = None
    language: Optional[str] = None
    framework: Optional[str] = None


class AIRequest(BaseModel):
    type: AIRequestType
    content: str
    context: Optional[AIRequestContext] = None
    user_id: Optional[str] = None


class AIResponse(BaseModel):
    success: bool
    content: str
    module: str
    provider: str
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class ModuleCapabilities(BaseModel):
    code_completion: bool = False
    code_explanation: bool = False
    ui_generation: bool = False
    deployment_help: bool = False
    general: bool = False

    def supports(self, request_type: AIRequestType | str) -> bool:
        try:
            return bool(getattr(self, AIRequestType(request_type).value))
        except ValueError:
            return False


class ModuleCapabilitiesUpdate(BaseModel):
    code_completion: Optional[bool] = None
    code_explanation: Optional[bool] = None
    ui_generation: Optional[bool] = None
    deployment_help: Optional[bool] = None
    general: Optional[bool] = None

