"""006: create trades table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE trades (
            id              VARCHAR(64)     PRIMARY KEY,
            market_id       VARCHAR(64)     NOT NULL REFERENCES markets(id),
            outcome         VARCHAR(3)      NOT NULL,
            shares          NUMERIC(20,8)   NOT NULL,
            price           NUMERIC(10,8)   NOT NULL,
            amount          NUMERIC(20,8)   NOT NULL,
            buy_order_id    VARCHAR(64)     REFERENCES orders(id),
            sell_order_id   VARCHAR(64)     REFERENCES orders(id),
            buyer_id        VARCHAR(64)     REFERENCES users(id),
            seller_id       VARCHAR(64)     REFERENCES users(id),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_trades_outcome CHECK (outcome IN ('yes', 'no')),
            CONSTRAINT ck_trades_shares_gt_0 CHECK (shares > 0),
            CONSTRAINT ck_trades_one_side CHECK (
                (buyer_id IS NOT NULL AND buy_order_id IS NOT NULL
                    AND seller_id IS NULL AND sell_order_id IS NULL)
                OR
                (seller_id IS NOT NULL AND sell_order_id IS NOT NULL
                    AND buyer_id IS NULL AND buy_order_id IS NULL)
            )
        );
    """)
    op.execute("CREATE UNIQUE INDEX uq_trades_buy_order ON trades (buy_order_id);")
    op.execute("CREATE UNIQUE INDEX uq_trades_sell_order ON trades (sell_order_id);")
    op.execute("CREATE INDEX idx_trades_market ON trades (market_id, created_at DESC);")
    op.execute("CREATE INDEX idx_trades_buyer ON trades (buyer_id, created_at DESC);")
    op.execute("CREATE INDEX idx_trades_seller ON trades (seller_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_trades_immutable
            BEFORE UPDATE OR DELETE ON trades
            FOR EACH ROW EXECUTE FUNCTION fn_forbid_mutation();
    """)
    op.execute("COMMENT ON TABLE trades IS 'Immutable AMM fills; one per filled order';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS trades CASCADE;")
