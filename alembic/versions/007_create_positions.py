"""007: create positions table

Revision ID: 007
Revises: 006
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE positions (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL REFERENCES users(id),
            market_id       VARCHAR(64)     NOT NULL REFERENCES markets(id),
            outcome         VARCHAR(3)      NOT NULL,
            shares          NUMERIC(20,8)   NOT NULL DEFAULT 0,
            avg_price       NUMERIC(10,8)   NOT NULL DEFAULT 0,
            total_cost      NUMERIC(20,8)   NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_positions_user_market_outcome UNIQUE (user_id, market_id, outcome),
            CONSTRAINT ck_positions_outcome CHECK (outcome IN ('yes', 'no')),
            CONSTRAINT ck_positions_shares_gte_0 CHECK (shares >= 0),
            CONSTRAINT ck_positions_cost_gte_0 CHECK (total_cost >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_positions_user ON positions (user_id);")
    op.execute("""
        CREATE TRIGGER trg_positions_updated_at
            BEFORE UPDATE ON positions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS positions CASCADE;")
