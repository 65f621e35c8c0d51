"""initial schema

Revision ID: 4c1e7a9b2f30
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4c1e7a9b2f30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all hypolab tables."""
    op.create_table(
        "ideas",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("category", sa.Text, nullable=False, server_default=""),
        sa.Column("priority", sa.Text, nullable=False, server_default="MEDIUM"),
        sa.Column("status", sa.Text, nullable=False, server_default="NEW"),
        sa.Column("reach", sa.Float, nullable=True),
        sa.Column("impact", sa.Float, nullable=True),
        sa.Column("confidence", sa.Float, nullable=True),
        sa.Column("effort", sa.Float, nullable=True),
        sa.Column("rice_score", sa.Float, nullable=True),
        sa.Column("ice_score", sa.Float, nullable=True),
        sa.Column("created_by", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
        sa.Column("deleted_at", sa.Text, nullable=True),
        sa.CheckConstraint(
            "status IN ('NEW', 'SCORED', 'SELECTED', 'IN_HYPOTHESIS', 'COMPLETED', 'ARCHIVED')",
            name="ck_ideas_status",
        ),
        sa.CheckConstraint(
            "priority IN ('LOW', 'MEDIUM', 'HIGH', 'CRITICAL')",
            name="ck_ideas_priority",
        ),
    )

    op.create_table(
        "ice_scores",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("idea_id", sa.Integer, sa.ForeignKey("ideas.id"), nullable=False),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column("impact", sa.Integer, nullable=False),
        sa.Column("confidence", sa.Integer, nullable=False),
        sa.Column("ease", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
        sa.UniqueConstraint("idea_id", "user_id", name="uq_ice_scores_idea_user"),
    )
    op.create_index("idx_ice_scores_idea", "ice_scores", ["idea_id"])

    op.create_table(
        "hypotheses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("idea_id", sa.Integer, sa.ForeignKey("ideas.id"), nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("statement", sa.Text, nullable=False, server_default=""),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("level", sa.Text, nullable=False, server_default="LEVEL_1"),
        sa.Column("stage", sa.Text, nullable=True),
        sa.Column("status", sa.Text, nullable=False, server_default="DRAFT"),
        sa.Column("confidence_level", sa.Integer, nullable=False, server_default="50"),
        sa.Column("reach", sa.Float, nullable=True),
        sa.Column("impact", sa.Float, nullable=True),
        sa.Column("confidence", sa.Float, nullable=True),
        sa.Column("effort", sa.Float, nullable=True),
        sa.Column("rice_score", sa.Float, nullable=True),
        sa.Column("ice_score", sa.Float, nullable=True),
        sa.Column("desk_research_notes", sa.Text, nullable=False, server_default=""),
        sa.Column("desk_research_sources", sa.Text, nullable=False, server_default=""),
        sa.Column("risks", sa.Text, nullable=False, server_default=""),
        sa.Column("opportunities", sa.Text, nullable=False, server_default=""),
        sa.Column("desk_research_date", sa.Text, nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_by", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
        sa.Column("deleted_at", sa.Text, nullable=True),
        sa.CheckConstraint(
            "status IN ('DRAFT', 'RESEARCH', 'SCORED', 'READY_FOR_TESTING', "
            "'IN_EXPERIMENT', 'VALIDATED', 'INVALIDATED', 'ITERATION', "
            "'COMPLETED', 'ARCHIVED')",
            name="ck_hypotheses_status",
        ),
        sa.CheckConstraint("level IN ('LEVEL_1', 'LEVEL_2')", name="ck_hypotheses_level"),
        sa.CheckConstraint(
            "stage IS NULL OR (level = 'LEVEL_2' AND stage IN ('DESK_RESEARCH', "
            "'EXPERIMENT_DESIGN', 'EXPERIMENT_EXECUTION', 'CONCLUSION'))",
            name="ck_hypotheses_stage",
        ),
    )
    op.create_index("idx_hypotheses_idea", "hypotheses", ["idea_id"])

    op.create_table(
        "experiments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("hypothesis_id", sa.Integer, sa.ForeignKey("hypotheses.id"), nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("type", sa.Text, nullable=False, server_default="OTHER"),
        sa.Column("status", sa.Text, nullable=False, server_default="PLANNING"),
        sa.Column("methodology", sa.Text, nullable=False, server_default=""),
        sa.Column("timeline", sa.Text, nullable=False, server_default=""),
        sa.Column("resources", sa.Text, nullable=False, server_default=""),
        sa.Column("success_metrics", sa.Text, nullable=False, server_default=""),
        sa.Column("start_date", sa.Text, nullable=True),
        sa.Column("end_date", sa.Text, nullable=True),
        sa.Column("created_by", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
        sa.CheckConstraint(
            "status IN ('PLANNING', 'RUNNING', 'PAUSED', 'COMPLETED', 'CANCELLED')",
            name="ck_experiments_status",
        ),
    )
    op.create_index("idx_experiments_hypothesis", "experiments", ["hypothesis_id"])

    op.create_table(
        "success_criteria",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("hypothesis_id", sa.Integer, sa.ForeignKey("hypotheses.id"), nullable=True),
        sa.Column("experiment_id", sa.Integer, sa.ForeignKey("experiments.id"), nullable=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("target_value", sa.Float, nullable=False),
        sa.Column("unit", sa.Text, nullable=False, server_default=""),
        sa.Column("actual_value", sa.Float, nullable=True),
        sa.Column("achieved", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.CheckConstraint(
            "(hypothesis_id IS NULL) != (experiment_id IS NULL)",
            name="ck_success_criteria_owner",
        ),
    )
    op.create_index("idx_success_criteria_hypothesis", "success_criteria", ["hypothesis_id"])
    op.create_index("idx_success_criteria_experiment", "success_criteria", ["experiment_id"])

    op.create_table(
        "experiment_results",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("experiment_id", sa.Integer, sa.ForeignKey("experiments.id"), nullable=False),
        sa.Column("metric_name", sa.Text, nullable=False),
        sa.Column("value", sa.Float, nullable=False),
        sa.Column("unit", sa.Text, nullable=False, server_default=""),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.Text, nullable=False),
    )
    op.create_index(
        "idx_experiment_results_experiment", "experiment_results", ["experiment_id"]
    )

    op.create_table(
        "hypothesis_transitions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("hypothesis_id", sa.Integer, sa.ForeignKey("hypotheses.id"), nullable=False),
        sa.Column("from_status", sa.Text, nullable=False),
        sa.Column("to_status", sa.Text, nullable=False),
        sa.Column("from_level", sa.Text, nullable=False),
        sa.Column("to_level", sa.Text, nullable=False),
        sa.Column("from_stage", sa.Text, nullable=True),
        sa.Column("to_stage", sa.Text, nullable=True),
        sa.Column("actor", sa.Text, nullable=False),
        sa.Column("reason", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.Text, nullable=False),
    )
    op.create_index(
        "idx_hypothesis_transitions_hypothesis", "hypothesis_transitions", ["hypothesis_id"]
    )


def downgrade() -> None:
    """Drop all hypolab tables."""
    op.drop_table("hypothesis_transitions")
    op.drop_table("experiment_results")
    op.drop_table("success_criteria")
    op.drop_table("experiments")
    op.drop_table("hypotheses")
    op.drop_table("ice_scores")
    op.drop_table("ideas")
