"""
Project scaffolding

Pipeline (strictly sequential):
  1. verify the project row exists (the only fatal failure)
  2. create <base>/<project_id> on disk, or fall back to db-only mode
  3. generate starter files from templates (+ optional AI files)
  4. write files to disk
  5. git init + initial commit
  6. store files in the projectfiles table
  7. ingest files into the retrieval index

Steps 2 and 4-7 degrade instead of failing: each problem is logged and
recorded as a ``ScaffoldWarning`` on the result.
"""
import logging
import os
import subprocess
import time
from pathlib import Path
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from app.config import Settings, settings as default_settings
from app.crud import crud_project
from app.schemas.scaffold import (
    DB_ONLY,
    ScaffoldFile,
    ScaffoldOptions,
    ScaffoldResult,
    ScaffoldStage,
    ScaffoldWarning,
)
from app.services.rag import RagService
from app.services.scaffold_templates import generate_project_files

logger = logging.getLogger(__name__)

AIFileGenerator = Callable[[str, str, Optional[str]], List[ScaffoldFile]]


class ProjectNotFoundError(LookupError):
    pass


class GitCommandError(RuntimeError):
    pass


def no_ai_files(name: str, language: str, framework: Optional[str]) -> List[ScaffoldFile]:
    """AI scaffolding is not wired to a provider yet; it contributes no files."""
    return []


def synthetic_commit_hash() -> str:
    return f"initial-scaffold-{int(time.time() * 1000)}"


def project_base_dir(settings: Settings) -> Path:
    """Writable root for project checkouts; serverless hosts only allow the temp dir."""
    if settings.is_serverless:
        return Path(settings.SERVERLESS_TMP_DIR) / "devflowhub" / "projects"
    return Path(settings.PROJECT_STORAGE_DIR)


def _run_git(args: List[str], cwd: Path, settings: Settings) -> str:
    cmd = [
        "git",
        "-c", f"user.name={settings.GIT_AUTHOR_NAME}",
        "-c", f"user.email={settings.GIT_AUTHOR_EMAIL}",
        *args,
    ]
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=settings.GIT_TIMEOUT_SECONDS,
        )
    except subprocess.TimeoutExpired:
        raise GitCommandError(f"git {args[0]} timed out") from None
    except FileNotFoundError:
        raise GitCommandError("git executable not found") from None
    if result.returncode != 0:
        raise GitCommandError(f"git {args[0]} failed: {result.stderr.strip() or result.stdout.strip()}")
    return result.stdout


def initialize_git_repository(project_path: Path, name: str, settings: Settings) -> str:
    """Init a repo, commit everything and return the HEAD hash."""
    _run_git(["init"], project_path, settings)
    _run_git(["add", "."], project_path, settings)
    _run_git(["commit", "-m", f"Initial commit: {name} project scaffold"], project_path, settings)
    return _run_git(["rev-parse", "HEAD"], project_path, settings).strip()


class ProjectScaffolder:

    def __init__(
        self,
        db: Session,
        *,
        settings: Settings = default_settings,
        rag_service: Optional[RagService] = None,
        base_dir: Optional[Path] = None,
        ai_file_generator: AIFileGenerator = no_ai_files,
    ):
        self.db = db
        self.settings = settings
        self.rag = rag_service or RagService(db)
        self.base_dir = Path(base_dir) if base_dir else project_base_dir(settings)
        self.ai_file_generator = ai_file_generator

    def scaffold(self, project_id: str, options: ScaffoldOptions) -> ScaffoldResult:
        warnings: List[ScaffoldWarning] = []

        def degrade(stage: ScaffoldStage, message: str) -> None:
            logger.warning("Scaffold %s [%s]: %s", project_id, stage.value, message, exc_info=True)
            warnings.append(ScaffoldWarning(stage=stage, message=message))

        # 1. Verify project
        if crud_project.get(self.db, project_id) is None:
            raise ProjectNotFoundError(f"Project with ID {project_id} not found")

        # 2. Project directory
        project_path: Optional[Path] = self.base_dir / project_id
        try:
            os.makedirs(project_path, exist_ok=True)
        except OSError as e:
            degrade(ScaffoldStage.DIRECTORY, f"could not create project directory, using db-only mode: {e}")
            project_path = None

        # 3. Generate files
        files = generate_project_files(options.name, options.language, options.framework, options.template)
        if options.use_ai_scaffolding:
            files.extend(self.ai_file_generator(options.name, options.language, options.framework))

        # 4. Write to disk
        if project_path is not None:
            try:
                self._write_files(project_path, files)
            except OSError as e:
                degrade(ScaffoldStage.WRITE, f"error writing files, using db-only mode: {e}")
                project_path = None

        # 5. Git
        if project_path is None:
            commit_hash = synthetic_commit_hash()
        else:
            try:
                commit_hash = initialize_git_repository(project_path, options.name, self.settings)
            except (GitCommandError, OSError) as e:
                degrade(ScaffoldStage.GIT, f"git initialization failed: {e}")
                commit_hash = synthetic_commit_hash()

        # 6. Database rows
        try:
            crud_project.create_files(self.db, project_id=project_id, files=files)
        except Exception as e:
            self.db.rollback()
            degrade(ScaffoldStage.DATABASE, f"failed to store project files: {e}")

        # 7. Retrieval index
        try:
            self.rag.ingest_documents(project_id, [
                {"filename": f.name, "content": f.content, "metadata": {"path": f.path, "type": "scaffold"}}
                for f in files
            ])
        except Exception as e:
            self.db.rollback()
            degrade(ScaffoldStage.RAG, f"RAG ingestion failed: {e}")

        result = ScaffoldResult(
            path=str(project_path) if project_path is not None else DB_ONLY,
            commit_hash=commit_hash,
            files=files,
            warnings=warnings,
        )
        logger.info(
            "Scaffolded project %s: %d files, path=%s, commit=%s, warnings=%d",
            project_id, len(files), result.path, commit_hash, len(warnings),
        )
        return result

    @staticmethod
    def _write_files(project_path: Path, files: List[ScaffoldFile]) -> None:
        for f in files:
            file_path = project_path / f.path
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(f.content, encoding="utf-8")


def scaffold_project(db: Session, project_id: str, options: ScaffoldOptions, **kwargs) -> ScaffoldResult:
    return ProjectScaffolder(db, **kwargs).scaffold(project_id, options)
