"""Module mapping schemas."""
from pydantic import BaseModel, ConfigDict

from app.services.module_mapping import DevFlowHubModule, LegacyTool, LegacyToolKey, Provider


class ModuleMapping(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    legacy_tool: LegacyTool
    legacy_key: LegacyToolKey
    module: DevFlowHubModule
    module_name: str
    provider: Provider
    icon: str
    color: str
    description: str


class ModuleNaming(BaseModel):
    legacy_tool: LegacyTool
    module: str
    display_name: str
    short_label: str
    rebranded: bool


class ParamTranslation(BaseModel):
    value: str
    translated: str
