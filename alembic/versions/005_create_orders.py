"""005: create orders table

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL REFERENCES users(id),
            market_id       VARCHAR(64)     NOT NULL REFERENCES markets(id),
            type            VARCHAR(10)     NOT NULL,
            side            VARCHAR(4)      NOT NULL,
            outcome         VARCHAR(3)      NOT NULL,
            amount          NUMERIC(20,8)   NOT NULL,
            limit_price     NUMERIC(10,8),
            min_price       NUMERIC(10,8),
            max_price       NUMERIC(10,8),
            max_slippage    NUMERIC(10,8)   NOT NULL DEFAULT 0.05,
            shares          NUMERIC(20,8)   NOT NULL,
            filled_shares   NUMERIC(20,8)   NOT NULL DEFAULT 0,
            avg_fill_price  NUMERIC(10,8),
            status          VARCHAR(10)     NOT NULL DEFAULT 'pending',
            expires_at      TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_type CHECK (type IN ('market', 'limit')),
            CONSTRAINT ck_orders_side CHECK (side IN ('buy', 'sell')),
            CONSTRAINT ck_orders_outcome CHECK (outcome IN ('yes', 'no')),
            CONSTRAINT ck_orders_status CHECK (
                status IN ('pending', 'filled', 'cancelled', 'expired')
            ),
            CONSTRAINT ck_orders_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_orders_limit_price CHECK (
                type = 'market' OR limit_price IS NOT NULL
            ),
            CONSTRAINT ck_orders_slippage CHECK (max_slippage >= 0 AND max_slippage <= 1),
            CONSTRAINT ck_orders_filled CHECK (
                filled_shares >= 0 AND (status <> 'filled' OR filled_shares = shares)
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_user ON orders (user_id, created_at DESC);")
    op.execute("CREATE INDEX idx_orders_market ON orders (market_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
