"""008: seed demo markets and user

Revision ID: 008
Revises: 007
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        INSERT INTO users (id, username) VALUES ('demo-user', 'demo');
    """)
    op.execute("""
        INSERT INTO user_balances (user_id, balance) VALUES ('demo-user', 10000);
    """)
    op.execute("""
        INSERT INTO markets (id, question, description, category, end_date,
                             resolution_source, liquidity)
        VALUES
        ('btc-100k-2026', 'Will Bitcoin trade above $100,000 on Dec 31, 2026?',
         'Resolves YES if the BTC/USD close on the resolution date is above $100,000.',
         'crypto', '2026-12-31T23:59:59Z', 'CoinGecko BTC/USD daily close', 50000),
        ('fed-cut-2026', 'Will the Fed cut rates at its December 2026 meeting?',
         'Resolves YES if the FOMC lowers the target range at the December meeting.',
         'politics', '2026-12-17T20:00:00Z', 'federalreserve.gov statement', 25000),
        ('agi-2027', 'Will a lab announce AGI before 2027?',
         NULL, 'tech', '2026-12-31T23:59:59Z', NULL, 10000);
    """)


def downgrade() -> None:
    op.execute("DELETE FROM markets WHERE id IN ('btc-100k-2026', 'fed-cut-2026', 'agi-2027');")
    op.execute("DELETE FROM user_balances WHERE user_id = 'demo-user';")
    op.execute("DELETE FROM users WHERE id = 'demo-user';")
