"""AI assistant routing API."""

from typing import Any, Optional

from fastapi import APIRouter, Depends

from app.api import deps
from app.schemas.ai import AIRequest, AIResponse, ModuleCapabilities, ModuleCapabilitiesUpdate
from app.services.ai_router import AIRouter
from app.services.module_mapping import DevFlowHubModule

router = APIRouter()


@router.post("/route", response_model=AIResponse)
async def route_ai_request(
    body: AIRequest,
    ai_router: AIRouter = Depends(deps.get_ai_router),
    user_id: Optional[str] = Depends(deps.get_current_user_id),
) -> Any:
    """Pick a module for the request and return its answer.

    Routing failures come back as ``success: false`` with 200 so the client can
    render the error message.
    """
    if body.user_id is None and user_id:
        body = body.model_copy(update={"user_id": user_id})
    return await ai_router.route_request(body)


@router.get("/capabilities/{module}", response_model=ModuleCapabilities)
def get_module_capabilities(
    module: DevFlowHubModule,
    ai_router: AIRouter = Depends(deps.get_ai_router),
) -> Any:
    return ai_router.get_module_capabilities(module)


@router.patch(
    "/capabilities/{module}",
    response_model=ModuleCapabilities,
    dependencies=[Depends(deps.require_admin_token)],
)
def update_module_capabilities(
    module: DevFlowHubModule,
    body: ModuleCapabilitiesUpdate,
    ai_router: AIRouter = Depends(deps.get_ai_router),
) -> Any:
    """Operator-only: changes apply to this process and reset on restart."""
    return ai_router.update_module_capabilities(module, **body.model_dump(exclude_none=True))
