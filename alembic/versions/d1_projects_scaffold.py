"""projects, projectfiles and ragdocuments tables

Revision ID: d1_projects_scaffold
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = "d1_projects_scaffold"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("language", sa.String(), nullable=False),
        sa.Column("framework", sa.String(), nullable=True),
        sa.Column("template", sa.String(), nullable=True),
        sa.Column("owner_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_projects_id", "projects", ["id"])
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"])

    op.create_table(
        "projectfiles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("path", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("project_id", "path", name="uq_projectfile_project_path"),
    )
    op.create_index("ix_projectfiles_id", "projectfiles", ["id"])
    op.create_index("ix_projectfiles_project_id", "projectfiles", ["project_id"])

    op.create_table(
        "ragdocuments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("filename", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("vector_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("project_id", "filename", name="uq_ragdocument_project_filename"),
    )
    op.create_index("ix_ragdocuments_id", "ragdocuments", ["id"])
    op.create_index("ix_ragdocuments_project_id", "ragdocuments", ["project_id"])


def downgrade() -> None:
    op.drop_table("ragdocuments")
    op.drop_table("projectfiles")
    op.drop_table("projects")
