"""
Project retrieval index

Keeps one ``RagDocument`` row per project file so the assistant can pull
project context into prompts. Search is a case-insensitive substring match on
content / filename; vector search can replace it behind the same interface.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.project import RagDocument

logger = logging.getLogger(__name__)

CONTEXT_DOCUMENT_LIMIT = 10
CONTEXT_SNIPPET_CHARS = 500


class RagService:

    def __init__(self, db: Session):
        self.db = db

    def ingest_documents(self, project_id: str, documents: Iterable[Dict[str, Any]]) -> int:
        """Insert documents, skipping filenames already indexed for the project.

        Raises on database errors; the caller decides whether ingestion is
        critical.
        """
        documents = list(documents)
        ingested_at = datetime.now(timezone.utc).isoformat()

        inserted = 0
        try:
            existing = {
                row.filename
                for row in self.db.query(RagDocument.filename).filter(RagDocument.project_id == project_id)
            }
            for doc in documents:
                if doc["filename"] in existing:
                    continue
                existing.add(doc["filename"])
                self.db.add(RagDocument(
                    project_id=project_id,
                    filename=doc["filename"],
                    content=doc["content"],
                    metadata_={**(doc.get("metadata") or {}), "ingested_at": ingested_at},
                ))
                inserted += 1
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error("Error ingesting RAG documents for project %s", project_id, exc_info=True)
            raise

        logger.info("Ingested %d/%d documents for project %s", inserted, len(documents), project_id)
        return inserted

    def search_documents(self, project_id: str, query: str, limit: int = 5) -> List[RagDocument]:
        try:
            pattern = f"%{query}%"
            return (
                self.db.query(RagDocument)
                .filter(
                    RagDocument.project_id == project_id,
                    or_(RagDocument.content.ilike(pattern), RagDocument.filename.ilike(pattern)),
                )
                .order_by(RagDocument.created_at.desc())
                .limit(limit)
                .all()
            )
        except Exception:
            logger.error("Error searching RAG documents", exc_info=True)
            return []

    def get_project_context(self, project_id: str) -> str:
        """Markdown digest of the newest documents, for assistant prompts."""
        try:
            documents = (
                self.db.query(RagDocument)
                .filter(RagDocument.project_id == project_id)
                .order_by(RagDocument.created_at.desc())
                .limit(CONTEXT_DOCUMENT_LIMIT)
                .all()
            )
        except Exception:
            logger.error("Error getting project context", exc_info=True)
            return "Error retrieving project context."

        if not documents:
            return "No project context available."

        sections = []
        for doc in documents:
            snippet = doc.content[:CONTEXT_SNIPPET_CHARS]
            if len(doc.content) > CONTEXT_SNIPPET_CHARS:
                snippet += "..."
            sections.append(f"## {doc.filename}\n```\n{snippet}\n```")
        return "# Project Context\n\n" + "\n\n".join(sections)

    def update_document(
        self,
        project_id: str,
        filename: str,
        content: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> RagDocument:
        now = datetime.now(timezone.utc).isoformat()
        doc = (
            self.db.query(RagDocument)
            .filter(RagDocument.project_id == project_id, RagDocument.filename == filename)
            .first()
        )
        try:
            if doc:
                doc.content = content
                doc.metadata_ = {**(metadata or {}), "updated_at": now}
            else:
                doc = RagDocument(
                    project_id=project_id,
                    filename=filename,
                    content=content,
                    metadata_={**(metadata or {}), "created_at": now},
                )
                self.db.add(doc)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error("Error updating RAG document %s", filename, exc_info=True)
            raise
        self.db.refresh(doc)
        return doc

    def delete_document(self, project_id: str, filename: str) -> int:
        try:
            deleted = (
                self.db.query(RagDocument)
                .filter(RagDocument.project_id == project_id, RagDocument.filename == filename)
                .delete()
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error("Error deleting RAG document %s", filename, exc_info=True)
            raise
        return deleted

    def get_project_documents(self, project_id: str) -> List[RagDocument]:
        try:
            return (
                self.db.query(RagDocument)
                .filter(RagDocument.project_id == project_id)
                .order_by(RagDocument.created_at.desc())
                .all()
            )
        except Exception:
            logger.error("Error getting project documents", exc_info=True)
            return []
