import logging
from typing import Any, Dict

from app.celery_app import celery_app
from app.crud import crud_project
from app.db.session import SessionLocal
from app.schemas.scaffold import ScaffoldOptions
from app.services.scaffold import ProjectNotFoundError, scaffold_project

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def scaffold_project_task(self, project_id: str, options: Dict[str, Any]) -> Dict[str, Any]:
    """
    Background scaffold for projects created by the assistant.

    No retries: every non-fatal problem is already degraded inside the
    pipeline and reported as a warning in the returned summary.
    """
    db = SessionLocal()
    try:
        try:
            result = scaffold_project(db, project_id, ScaffoldOptions(**options))
        except ProjectNotFoundError as e:
            logger.error("Scaffold task %s: %s", self.request.id, e)
            return {"status": "failed", "error": str(e)}

        project = crud_project.get(db, project_id)
        if project:
            crud_project.set_status(db, db_obj=project, status="scaffolded")

        return {
            "status": "completed",
            "path": result.path,
            "persisted_to_disk": result.persisted_to_disk,
            "commit_hash": result.commit_hash,
            "file_count": len(result.files),
            "warnings": [w.model_dump(mode="json") for w in result.warnings],
        }
    finally:
        db.close()
