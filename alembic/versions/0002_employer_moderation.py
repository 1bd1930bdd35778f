"""Employer moderation columns and applicant archive

Revision ID: 0002_employer_moderation
Revises: 0001_initial_schema
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002_employer_moderation"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None

PENDING_COLUMNS: list[tuple[str, int]] = [
    ("pending_company_email", 150),
    ("pending_landline_no", 50),
    ("pending_mobile_no", 50),
    ("pending_company_logo", 500),
]


def _has_table(insp: sa.Inspector, table: str) -> bool:
    return table in insp.get_table_names()


def _has_column(insp: sa.Inspector, table: str, column: str) -> bool:
    if not _has_table(insp, table):
        return False
    return column in {c["name"] for c in insp.get_columns(table)}


def _ensure_index(table: str, name: str, columns: list[str], unique: bool = False) -> None:
    insp = sa.inspect(op.get_bind())
    existing = {idx["name"] for idx in insp.get_indexes(table)}
    if name not in existing:
        op.create_index(name, table, columns, unique=unique)


def upgrade() -> None:
    insp = sa.inspect(op.get_bind())

    if _has_table(insp, "employers"):
        missing = [(name, size) for name, size in PENDING_COLUMNS if not _has_column(insp, "employers", name)]
        if missing:
            with op.batch_alter_table("employers", schema=None) as batch_op:
                for name, size in missing:
                    batch_op.add_column(sa.Column(name, sa.String(length=size), nullable=True))

    insp = sa.inspect(op.get_bind())
    if not _has_table(insp, "applicants"):
        op.create_table(
            "applicants",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("original_app_id", sa.Integer(), nullable=False, unique=True),
            sa.Column("career_id", sa.Integer(), nullable=False),
            sa.Column("first_name", sa.String(length=100), nullable=False),
            sa.Column("last_name", sa.String(length=100), nullable=False),
            sa.Column("phone_no", sa.String(length=50), nullable=False),
            sa.Column("email", sa.String(length=150), nullable=False),
            sa.Column("user_name", sa.String(length=100), nullable=False, server_default=""),
            sa.Column("resume_path", sa.String(length=500), nullable=False),
            sa.Column("career_title", sa.String(length=255), nullable=False),
            sa.Column("company_name", sa.String(length=255), nullable=False, server_default=""),
            sa.Column("employer_id", sa.String(length=100), nullable=False),
            sa.Column("date_submitted", sa.DateTime(timezone=True), nullable=False),
            sa.Column("archived_at", sa.DateTime(timezone=True), nullable=False),
        )
    _ensure_index("applicants", "ix_applicants_user_name", ["user_name"])
    _ensure_index("applicants", "ix_applicants_employer_id", ["employer_id"])


def downgrade() -> None:
    insp = sa.inspect(op.get_bind())

    if _has_table(insp, "applicants"):
        idxs = {idx["name"] for idx in insp.get_indexes("applicants")}
        for name in ("ix_applicants_user_name", "ix_applicants_employer_id"):
            if name in idxs:
                op.drop_index(name, table_name="applicants")
        op.drop_table("applicants")

    insp = sa.inspect(op.get_bind())
    present = [name for name, _ in PENDING_COLUMNS if _has_column(insp, "employers", name)]
    if present:
        with op.batch_alter_table("employers", schema=None) as batch_op:
            for name in present:
                batch_op.drop_column(name)
