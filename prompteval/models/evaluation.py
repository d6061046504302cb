"""Evaluation model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from prompteval.database import Base
from prompteval.models._types import new_id, utcnow


class Evaluation(Base):
    """Stored result for one (test case, version) pair - at most one row per pair."""

    __tablename__ = "evaluations"
    __table_args__ = (
        UniqueConstraint(
            "test_case_id", "prompt_version_id", name="uq_evaluations_test_case_version"
        ),
    )

    evaluation_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    test_case_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("test_cases.test_case_id", ondelete="CASCADE"), nullable=False
    )
    prompt_version_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("prompt_versions.version_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rendered_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    output: Mapped[str] = mapped_column(Text, nullable=False)
    model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    request_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
