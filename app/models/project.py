import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, JSON, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.db.base_class import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Project(Base):
    id = Column(String(36), primary_key=True, default=_new_id, index=True)
    name = Column(String, nullable=False)
    language = Column(String, nullable=False)     # javascript, typescript, python, java, ...
    framework = Column(String, nullable=True)     # react, next, express, flask, django
    template = Column(String, default="scratch")
    owner_id = Column(String, nullable=True, index=True)
    status = Column(String, default="created")    # created, scaffolded

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    files = relationship("ProjectFile", back_populates="project", cascade="all, delete-orphan")
    rag_documents = relationship("RagDocument", back_populates="project", cascade="all, delete-orphan")


class ProjectFile(Base):
    id = Column(String(36), primary_key=True, default=_new_id, index=True)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)

    name = Column(String, nullable=False)
    path = Column(String, nullable=False)
    content = Column(Text, nullable=False, default="")
    type = Column(String, default="file")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    project = relationship("Project", back_populates="files")

    __table_args__ = (
        UniqueConstraint("project_id", "path", name="uq_projectfile_project_path"),
    )


class RagDocument(Base):
    """Retrieval index row: one ingested file of a project."""
    id = Column(String(36), primary_key=True, default=_new_id, index=True)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)

    filename = Column(String, nullable=False)
    content = Column(Text, nullable=False, default="")
    metadata_ = Column("metadata", JSON, default=dict)  # path, type, ingested_at
    vector_id = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    project = relationship("Project", back_populates="rag_documents")

    __table_args__ = (
        UniqueConstraint("project_id", "filename", name="uq_ragdocument_project_filename"),
    )
