"""Project creation, scaffolding and project retrieval context."""

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api import deps
from app.crud import crud_project
from app.schemas.scaffold import (
    Project,
    ProjectCreate,
    ProjectFile,
    ProjectWithScaffold,
    RagDocument,
    ScaffoldOptions,
    ScaffoldResult,
)
from app.services.rag import RagService
from app.services.scaffold import ProjectNotFoundError, scaffold_project
from app.tasks.scaffold_tasks import scaffold_project_task

router = APIRouter()


def _get_project_or_404(db: Session, project_id: str):
    project = crud_project.get(db, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.post("/", response_model=ProjectWithScaffold)
def create_project(
    body: ProjectCreate,
    db: Session = Depends(deps.get_db),
    user_id: Optional[str] = Depends(deps.get_current_user_id),
) -> Any:
    """Create the project row and scaffold its starter files."""
    if body.owner_id is None and user_id:
        body = body.model_copy(update={"owner_id": user_id})
    project = crud_project.create(db, obj_in=body)

    options = ScaffoldOptions(**body.model_dump(exclude={"owner_id"}))
    result = scaffold_project(db, project.id, options)
    project = crud_project.set_status(db, db_obj=project, status="scaffolded")
    return ProjectWithScaffold(project=Project.model_validate(project), scaffold=result)


@router.get("/", response_model=List[Project])
def list_my_projects(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(deps.get_db),
    user_id: Optional[str] = Depends(deps.get_current_user_id),
) -> Any:
    """Projects owned by the calling user."""
    if not user_id:
        raise HTTPException(status_code=401, detail="X-User-ID header required")
    return crud_project.get_by_owner(db, user_id, skip=skip, limit=limit)


@router.post("/{project_id}/scaffold", response_model=ScaffoldResult)
def scaffold_existing_project(
    project_id: str,
    body: ScaffoldOptions,
    background: bool = False,
    db: Session = Depends(deps.get_db),
) -> Any:
    """Scaffold now, or with ``background=true`` queue it and return the task id."""
    if background:
        _get_project_or_404(db, project_id)
        task = scaffold_project_task.delay(project_id=project_id, options=body.model_dump())
        return JSONResponse(
            status_code=202,
            content={"project_id": project_id, "task_id": task.id, "status": "queued"},
        )
    try:
        return scaffold_project(db, project_id, body)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{project_id}", response_model=Project)
def get_project(project_id: str, db: Session = Depends(deps.get_db)) -> Any:
    return _get_project_or_404(db, project_id)


@router.get("/{project_id}/files", response_model=List[ProjectFile])
def list_project_files(project_id: str, db: Session = Depends(deps.get_db)) -> Any:
    _get_project_or_404(db, project_id)
    return crud_project.get_files(db, project_id)


@router.get("/{project_id}/search", response_model=List[RagDocument])
def search_project(
    project_id: str,
    q: str,
    limit: int = 5,
    db: Session = Depends(deps.get_db),
) -> Any:
    _get_project_or_404(db, project_id)
    return RagService(db).search_documents(project_id, q, limit=limit)


@router.get("/{project_id}/context")
def get_project_context(project_id: str, db: Session = Depends(deps.get_db)) -> Any:
    _get_project_or_404(db, project_id)
    return {"project_id": project_id, "context": RagService(db).get_project_context(project_id)}
