"""Initial schema - projects, prompts, prompt_versions, test_cases, evaluations.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("project_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )

    op.create_table(
        "prompts",
        sa.Column("prompt_id", sa.String(36), primary_key=True),
        sa.Column(
            "project_id",
            sa.String(36),
            sa.ForeignKey("projects.project_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("ix_prompts_project_id", "prompts", ["project_id"])

    op.create_table(
        "prompt_versions",
        sa.Column("version_id", sa.String(36), primary_key=True),
        sa.Column(
            "prompt_id",
            sa.String(36),
            sa.ForeignKey("prompts.prompt_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("template", sa.Text(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("ix_prompt_versions_prompt_id", "prompt_versions", ["prompt_id"])
    op.create_unique_constraint(
        "uq_prompt_versions_prompt_sequence",
        "prompt_versions",
        ["prompt_id", "sequence"],
    )

    op.create_table(
        "test_cases",
        sa.Column("test_case_id", sa.String(36), primary_key=True),
        sa.Column(
            "prompt_id",
            sa.String(36),
            sa.ForeignKey("prompts.prompt_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("input_json", JSON_TYPE, nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("ix_test_cases_prompt_id", "test_cases", ["prompt_id"])

    op.create_table(
        "evaluations",
        sa.Column("evaluation_id", sa.String(36), primary_key=True),
        sa.Column(
            "test_case_id",
            sa.String(36),
            sa.ForeignKey("test_cases.test_case_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "prompt_version_id",
            sa.String(36),
            sa.ForeignKey("prompt_versions.version_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("rendered_prompt", sa.Text(), nullable=True),
        sa.Column("output", sa.Text(), nullable=False),
        sa.Column("model", sa.String(255), nullable=True),
        sa.Column("request_hash", sa.String(64), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("ix_evaluations_prompt_version_id", "evaluations", ["prompt_version_id"])
    # Natural key of an experiment: at most one stored result per pair
    op.create_unique_constraint(
        "uq_evaluations_test_case_version",
        "evaluations",
        ["test_case_id", "prompt_version_id"],
    )


def downgrade() -> None:
    op.drop_table("evaluations")
    op.drop_table("test_cases")
    op.drop_table("prompt_versions")
    op.drop_table("prompts")
    op.drop_table("projects")
