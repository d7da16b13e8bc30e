from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from app.models.project import Project, ProjectFile
from app.schemas.scaffold import ProjectCreate, ScaffoldFile


def get(db: Session, project_id: str) -> Optional[Project]:
    return db.query(Project).filter(Project.id == project_id).first()


def get_by_owner(db: Session, owner_id: str, skip: int = 0, limit: int = 100) -> List[Project]:
    return db.query(Project).filter(
        Project.owner_id == owner_id
    ).offset(skip).limit(limit).all()


def create(db: Session, *, obj_in: ProjectCreate) -> Project:
    db_obj = Project(
        name=obj_in.name,
        language=obj_in.language,
        framework=obj_in.framework,
        template=obj_in.template,
        owner_id=obj_in.owner_id,
        status="created",
    )
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def set_status(db: Session, *, db_obj: Project, status: str) -> Project:
    db_obj.status = status
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def create_files(db: Session, *, project_id: str, files: Iterable[ScaffoldFile]) -> int:
    """Bulk insert project files, skipping paths the project already has."""
    existing = {
        row.path
        for row in db.query(ProjectFile.path).filter(ProjectFile.project_id == project_id)
    }
    inserted = 0
    for f in files:
        if f.path in existing:
            continue
        existing.add(f.path)
        db.add(ProjectFile(
            project_id=project_id,
            name=f.name,
            path=f.path,
            content=f.content,
            type="file",
        ))
        inserted += 1
    db.commit()
    return inserted


def get_files(db: Session, project_id: str) -> List[ProjectFile]:
    return db.query(ProjectFile).filter(
        ProjectFile.project_id == project_id
    ).order_by(ProjectFile.path).all()
