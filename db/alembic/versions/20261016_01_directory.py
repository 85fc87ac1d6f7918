"""
# Nombre de archivo: 20261016_01_directory.py
# Ubicación de archivo: db/alembic/versions/20261016_01_directory.py
# Descripción: Crea las tablas del directorio (team_members, profiles, occurrences, app_config)
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261016_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("CREATE SCHEMA IF NOT EXISTS app")

    op.create_table(
        "team_members",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("reports_to_id", sa.String(length=64), nullable=True),
        sa.Column("supervisor_id", sa.String(length=64), nullable=True),
        sa.Column("coordenador_id", sa.String(length=64), nullable=True),
        sa.Column("gerente_id", sa.String(length=64), nullable=True),
        sa.Column("controlador_id", sa.String(length=64), nullable=True),
        sa.Column("cluster", sa.String(length=128), nullable=True),
        sa.Column("filial", sa.String(length=128), nullable=True),
        sa.Column("segment", sa.String(length=8), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        schema="app",
    )
    op.create_index("ix_team_members_name", "team_members", ["name"], schema="app")
    op.create_index("ix_team_members_role", "team_members", ["role"], schema="app")

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=128), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("nickname", sa.String(length=128), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="CONTROLADOR"),
        sa.Column("allowed_clusters", sa.JSON(), nullable=False),
        sa.Column("allowed_branches", sa.JSON(), nullable=False),
        sa.Column("team_member_id", sa.String(length=64), nullable=True),
        schema="app",
    )

    op.create_table(
        "occurrences",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("user_name", sa.String(length=255), nullable=False),
        sa.Column("registered_by_user_id", sa.String(length=128), nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("time", sa.String(length=8), nullable=False, server_default=""),
        sa.Column("category", sa.String(length=255), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="REGISTRADA"),
        sa.Column("escalation_level", sa.String(length=32), nullable=False),
        sa.Column("cluster", sa.String(length=128), nullable=True),
        sa.Column("branch", sa.String(length=128), nullable=True),
        sa.Column("sector", sa.String(length=128), nullable=True),
        sa.Column("location", sa.JSON(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("audit_trail", sa.JSON(), nullable=False),
        schema="app",
    )
    op.create_index("ix_occurrences_user_id", "occurrences", ["user_id"], schema="app")
    op.create_index("ix_occurrences_date", "occurrences", ["date"], schema="app")

    op.create_table(
        "app_config",
        sa.Column("key", sa.String(length=64), primary_key=True),
        sa.Column("value", sa.JSON(), nullable=False),
        schema="app",
    )


def downgrade() -> None:
    op.drop_table("app_config", schema="app")
    op.drop_index("ix_occurrences_date", table_name="occurrences", schema="app")
    op.drop_index("ix_occurrences_user_id", table_name="occurrences", schema="app")
    op.drop_table("occurrences", schema="app")
    op.drop_table("profiles", schema="app")
    op.drop_index("ix_team_members_role", table_name="team_members", schema="app")
    op.drop_index("ix_team_members_name", table_name="team_members", schema="app")
    op.drop_table("team_members", schema="app")
