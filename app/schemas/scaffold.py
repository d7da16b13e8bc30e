"""Project & scaffold schemas."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

DB_ONLY = "db-only"


class ScaffoldOptions(BaseModel):
    name: str = Field(..., min_length=1)
    language: str = Field(..., min_length=1)
    framework: Optional[str] = None
    template: str = "scratch"
    use_ai_scaffolding: bool = False


class ScaffoldFile(BaseModel):
    name: str
    path: str
    content: str


class ScaffoldStage(str, Enum):
    DIRECTORY = "directory"
    WRITE = "write"
    GIT = "git"
    DATABASE = "database"
    RAG = "rag"


class ScaffoldWarning(BaseModel):
    stage: ScaffoldStage
    message: str


class ScaffoldResult(BaseModel):
    path: str
    commit_hash: str
    files: List[ScaffoldFile]
    warnings: List[ScaffoldWarning] = Field(default_factory=list)

    @property
    def persisted_to_disk(self) -> bool:
        return self.path != DB_ONLY


class ProjectCreate(ScaffoldOptions):
    owner_id: Optional[str] = None


class Project(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    language: str
    framework: Optional[str] = None
    template: Optional[str] = None
    owner_id: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None


class ProjectWithScaffold(BaseModel):
    project: Project
    scaffold: ScaffoldResult


class ProjectFile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    path: str
    content: str
    type: str = "file"


class RagDocument(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    filename: str
    content: str
