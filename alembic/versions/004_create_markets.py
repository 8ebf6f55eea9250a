"""004: create markets table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE markets (
            id                  VARCHAR(64)     PRIMARY KEY,
            question            VARCHAR(500)    NOT NULL,
            description         TEXT,
            category            VARCHAR(32)     NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'active',
            end_date            TIMESTAMPTZ,
            resolution_source   VARCHAR(500),
            yes_price           NUMERIC(10,8)   NOT NULL DEFAULT 0.5,
            no_price            NUMERIC(10,8)   NOT NULL DEFAULT 0.5,
            volume              NUMERIC(20,8)   NOT NULL DEFAULT 0,
            liquidity           NUMERIC(20,8)   NOT NULL DEFAULT 0,
            trading_fee         NUMERIC(10,8)   NOT NULL DEFAULT 0.02,
            resolved_at         TIMESTAMPTZ,
            resolved_outcome    VARCHAR(3),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_markets_price_range CHECK (
                yes_price >= 0 AND yes_price <= 1 AND no_price >= 0 AND no_price <= 1
            ),
            CONSTRAINT ck_markets_prices_sum_to_one CHECK (yes_price + no_price = 1),
            CONSTRAINT ck_markets_volume_gte_0 CHECK (volume >= 0),
            CONSTRAINT ck_markets_status CHECK (
                status IN ('active', 'resolved', 'disputed', 'cancelled')
            ),
            CONSTRAINT ck_markets_category CHECK (
                category IN ('crypto', 'politics', 'sports', 'tech', 'entertainment')
            ),
            CONSTRAINT ck_markets_resolution CHECK (
                resolved_outcome IS NULL OR resolved_outcome IN ('yes', 'no')
            )
        );
    """)
    op.execute("CREATE INDEX idx_markets_status ON markets (status);")
    op.execute("CREATE INDEX idx_markets_created ON markets (created_at DESC, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE markets IS 'Binary markets quoted by the AMM; yes + no = 1';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
