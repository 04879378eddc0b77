"""QR codes and Shopify sessions

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from alembic import op


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.execute("""
        CREATE TABLE IF NOT EXISTS shopify_sessions (
            shop TEXT PRIMARY KEY,
            access_token TEXT NOT NULL,
            scope TEXT,
            created_at TIMESTAMP NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMP NOT NULL DEFAULT NOW()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS qr_codes (
            id SERIAL PRIMARY KEY,
            title TEXT NOT NULL,
            shop TEXT NOT NULL,
            product_id TEXT NOT NULL,
            product_handle TEXT NOT NULL,
            product_variant_id TEXT NOT NULL,
            destination TEXT NOT NULL,
            scans INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP NOT NULL DEFAULT NOW()
        )
    """)

    # Admin list: WHERE shop = ? ORDER BY id DESC
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_qr_codes_shop_id
        ON qr_codes(shop, id DESC)
    """)


def downgrade():
    op.execute("DROP INDEX IF EXISTS idx_qr_codes_shop_id")
    op.execute("DROP TABLE IF EXISTS qr_codes")
    op.execute("DROP TABLE IF EXISTS shopify_sessions")
