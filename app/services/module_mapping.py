"""
DevFlowHub module mapping

Maps the legacy third-party tool names (Cursor, Replit, v0, Bolt) onto the
first-party module names while keeping the provider for provenance.

Naming rules differ between the legacy UI and the rebranded UI. The choice is
made once per request via ``naming_strategy`` instead of re-checking the
REBRAND_V1_0 flag in every helper.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Protocol

from app.services.feature_flags import FeatureFlagName, FeatureFlagStore

logger = logging.getLogger(__name__)


class LegacyTool(str, Enum):
    CURSOR = "CURSOR"
    REPLIT = "REPLIT"
    V0 = "V0"
    BOLT = "BOLT"


class LegacyToolKey(str, Enum):
    CURSOR = "cursor"
    REPLIT = "replit"
    V0 = "v0"
    BOLT = "bolt"


class DevFlowHubModule(str, Enum):
    EDITOR = "editor"
    SANDBOX = "sandbox"
    UI_STUDIO = "ui_studio"
    DEPLOYER = "deployer"


class Provider(str, Enum):
    CURSOR = "cursor"
    REPLIT = "replit"
    V0 = "v0"
    BOLT = "bolt"


class ModuleMappingNotFoundError(LookupError):
    pass


@dataclass(frozen=True)
class ModuleMapping:
    legacy_tool: LegacyTool
    legacy_key: LegacyToolKey
    module: DevFlowHubModule
    module_name: str
    short_name: str   # label shown by the legacy UI
    provider: Provider
    icon: str
    color: str
    description: str


MODULE_MAPPINGS: tuple[ModuleMapping, ...] = (
    ModuleMapping(
        legacy_tool=LegacyTool.CURSOR,
        legacy_key=LegacyToolKey.CURSOR,
        module=DevFlowHubModule.EDITOR,
        module_name="DevFlowHub Editor",
        short_name="Editor",
        provider=Provider.CURSOR,
        icon="Terminal",
        color="bg-green-600",
        description="Code editor with AI assistance",
    ),
    ModuleMapping(
        legacy_tool=LegacyTool.REPLIT,
        legacy_key=LegacyToolKey.REPLIT,
        module=DevFlowHubModule.SANDBOX,
        module_name="DevFlowHub Sandbox",
        short_name="Sandbox",
        provider=Provider.REPLIT,
        icon="Code2",
        color="bg-blue-600",
        description="Cloud development environment",
    ),
    ModuleMapping(
        legacy_tool=LegacyTool.V0,
        legacy_key=LegacyToolKey.V0,
        module=DevFlowHubModule.UI_STUDIO,
        module_name="DevFlowHub UI Studio",
        short_name="UI Studio",
        provider=Provider.V0,
        icon="Sparkles",
        color="bg-purple-600",
        description="AI-powered UI component generation",
    ),
    ModuleMapping(
        legacy_tool=LegacyTool.BOLT,
        legacy_key=LegacyToolKey.BOLT,
        module=DevFlowHubModule.DEPLOYER,
        module_name="DevFlowHub Deployer",
        short_name="Deployer",
        provider=Provider.BOLT,
        icon="Rocket",
        color="bg-orange-600",
        description="Deployment and hosting pipeline",
    ),
)


class ModuleMappingTable:
    """Immutable bidirectional lookup between legacy tools and modules."""

    def __init__(self, mappings: Iterable[ModuleMapping] = MODULE_MAPPINGS):
        mappings = tuple(mappings)
        by_tool = {m.legacy_tool: m for m in mappings}
        by_key = {m.legacy_key: m for m in mappings}
        by_module = {m.module: m for m in mappings}
        if not (len(mappings) == len(by_tool) == len(by_key) == len(by_module)):
            raise ValueError("Module mappings must be one-to-one between legacy tools and modules")

        self._mappings = mappings
        self._by_tool: Mapping[LegacyTool, ModuleMapping] = MappingProxyType(by_tool)
        self._by_key: Mapping[LegacyToolKey, ModuleMapping] = MappingProxyType(by_key)
        self._by_module: Mapping[DevFlowHubModule, ModuleMapping] = MappingProxyType(by_module)

    def get_mapping(self, legacy_tool: LegacyTool | str) -> ModuleMapping:
        return self._by_tool[LegacyTool(legacy_tool)]

    def get_mapping_by_key(self, legacy_key: LegacyToolKey | str) -> ModuleMapping:
        mapping = self._by_key.get(_coerce(LegacyToolKey, legacy_key))
        if mapping is None:
            raise ModuleMappingNotFoundError(
                f"No module mapping found for legacy key: {_raw(legacy_key)}"
            )
        return mapping

    def get_mapping_by_module(self, module: DevFlowHubModule | str) -> ModuleMapping:
        mapping = self._by_module.get(_coerce(DevFlowHubModule, module))
        if mapping is None:
            raise ModuleMappingNotFoundError(
                f"No module mapping found for module: {_raw(module)}"
            )
        return mapping

    def all_mappings(self) -> List[ModuleMapping]:
        return list(self._mappings)

    def all_modules(self) -> List[DevFlowHubModule]:
        return [m.module for m in self._mappings]


def _coerce(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _raw(value) -> str:
    return value.value if isinstance(value, Enum) else str(value)


# ─────────────────────────────────────────────
# Naming strategies
# ─────────────────────────────────────────────

class NamingStrategy(Protocol):
    rebranded: bool

    def to_module(self, legacy_tool: LegacyTool | str) -> str: ...
    def display_name(self, legacy_tool: LegacyTool | str) -> str: ...
    def short_label(self, legacy_tool: LegacyTool | str) -> str: ...
    def tool_param_to_module_param(self, tool_param: str) -> str: ...
    def module_param_to_tool_param(self, module_param: str) -> str: ...


class RebrandedNaming:
    """Module-centric names (``DevFlowHub Editor``, ``?module=editor``)."""

    rebranded = True

    def __init__(self, table: ModuleMappingTable):
        self.table = table

    def to_module(self, legacy_tool: LegacyTool | str) -> str:
        return self.table.get_mapping(legacy_tool).module.value

    def display_name(self, legacy_tool: LegacyTool | str) -> str:
        return self.table.get_mapping(legacy_tool).module_name

    def short_label(self, legacy_tool: LegacyTool | str) -> str:
        module = self.table.get_mapping(legacy_tool).module.value
        # Only the first underscore is replaced: "ui_studio" -> "Ui Studio"
        return " ".join(word.capitalize() for word in module.replace("_", " ", 1).split(" "))

    def tool_param_to_module_param(self, tool_param: str) -> str:
        return self.table.get_mapping_by_key(tool_param.lower()).module.value

    def module_param_to_tool_param(self, module_param: str) -> str:
        return self.table.get_mapping_by_module(module_param).legacy_key.value


class LegacyNaming:
    """Pre-rebrand names; URL params pass through untouched."""

    rebranded = False

    def __init__(self, table: ModuleMappingTable):
        self.table = table

    def to_module(self, legacy_tool: LegacyTool | str) -> str:
        return LegacyTool(legacy_tool).value.lower()

    def display_name(self, legacy_tool: LegacyTool | str) -> str:
        return self.table.get_mapping(legacy_tool).short_name

    def short_label(self, legacy_tool: LegacyTool | str) -> str:
        return self.table.get_mapping(legacy_tool).short_name

    def tool_param_to_module_param(self, tool_param: str) -> str:
        return tool_param

    def module_param_to_tool_param(self, module_param: str) -> str:
        return module_param


def naming_strategy(
    flags: FeatureFlagStore,
    table: ModuleMappingTable,
    user_id: Optional[str] = None,
) -> NamingStrategy:
    if flags.is_enabled(FeatureFlagName.REBRAND_V1_0, user_id=user_id):
        return RebrandedNaming(table)
    return LegacyNaming(table)
