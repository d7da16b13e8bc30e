"""Module mapping API (legacy tool ↔ DevFlowHub module)."""

from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException

from app.api import deps
from app.schemas.module import ModuleMapping, ModuleNaming, ParamTranslation
from app.services.module_mapping import (
    LegacyTool,
    ModuleMappingNotFoundError,
    ModuleMappingTable,
    NamingStrategy,
)

router = APIRouter()


@router.get("/", response_model=List[ModuleMapping])
def list_modules(table: ModuleMappingTable = Depends(deps.get_module_table)) -> Any:
    return table.all_mappings()


@router.get("/by-tool/{legacy_tool}", response_model=ModuleMapping)
def get_by_legacy_tool(
    legacy_tool: LegacyTool,
    table: ModuleMappingTable = Depends(deps.get_module_table),
) -> Any:
    return table.get_mapping(legacy_tool)


@router.get("/by-key/{legacy_key}", response_model=ModuleMapping)
def get_by_legacy_key(
    legacy_key: str,
    table: ModuleMappingTable = Depends(deps.get_module_table),
) -> Any:
    try:
        return table.get_mapping_by_key(legacy_key)
    except ModuleMappingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/by-module/{module}", response_model=ModuleMapping)
def get_by_module(
    module: str,
    table: ModuleMappingTable = Depends(deps.get_module_table),
) -> Any:
    try:
        return table.get_mapping_by_module(module)
    except ModuleMappingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/naming/{legacy_tool}", response_model=ModuleNaming)
def get_naming(
    legacy_tool: LegacyTool,
    naming: NamingStrategy = Depends(deps.get_naming),
) -> Any:
    return ModuleNaming(
        legacy_tool=legacy_tool,
        module=naming.to_module(legacy_tool),
        display_name=naming.display_name(legacy_tool),
        short_label=naming.short_label(legacy_tool),
        rebranded=naming.rebranded,
    )


@router.get("/params/tool-to-module", response_model=ParamTranslation)
def tool_param_to_module_param(
    tool: str,
    naming: NamingStrategy = Depends(deps.get_naming),
) -> Any:
    try:
        return ParamTranslation(value=tool, translated=naming.tool_param_to_module_param(tool))
    except ModuleMappingNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/params/module-to-tool", response_model=ParamTranslation)
def module_param_to_tool_param(
    module: str,
    naming: NamingStrategy = Depends(deps.get_naming),
) -> Any:
    try:
        return ParamTranslation(value=module, translated=naming.module_param_to_tool_param(module))
    except ModuleMappingNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
