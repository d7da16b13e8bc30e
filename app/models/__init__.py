from app.db.base_class import Base
from app.models.project import Project, ProjectFile, RagDocument
