from datetime import datetime

from flask_login import UserMixin
from database import get_db
from constants import QR_CODE_OPTIONAL_DEFAULTS, QR_CODE_WRITABLE_FIELDS


class ShopSession(UserMixin):
    """
    Offline access token for an installed shop.
    Doubles as the flask-login principal for embedded admin requests.
    """
    def __init__(self, shop, access_token, scope=None, created_at=None, updated_at=None):
        self.shop = shop
        self.access_token = access_token
        self.scope = scope
        self.created_at = created_at
        self.updated_at = updated_at

    def get_id(self):
        return self.shop

    @staticmethod
    def get(shop):
        db = get_db()
        row = db.execute(
            "SELECT * FROM shopify_sessions WHERE shop = %s", (shop,)
        ).fetchone()
        if not row:
            return None
        row = dict(row)
        return ShopSession(
            shop=row['shop'],
            access_token=row['access_token'],
            scope=row.get('scope'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )

    def save(self):
        """Upsert the session; reinstalling a shop replaces its token."""
        db = get_db()
        db.execute(
            """
            INSERT INTO shopify_sessions (shop, access_token, scope, created_at, updated_at)
            VALUES (%s, %s, %s, NOW(), NOW())
            ON CONFLICT (shop) DO UPDATE
               SET access_token = EXCLUDED.access_token,
                   scope = EXCLUDED.scope,
                   updated_at = NOW()
            """,
            (self.shop, self.access_token, self.scope)
        )
        db.commit()
        return self

    @staticmethod
    def delete_for_shop(shop):
        db = get_db()
        cur = db.execute("DELETE FROM shopify_sessions WHERE shop = %s", (shop,))
        db.commit()
        return cur.rowcount


class QRCode:
    ALLOWED_COLUMNS = (
        'id', 'title', 'shop', 'product_id', 'product_handle',
        'product_variant_id', 'destination', 'scans', 'created_at'
    )

    def __init__(self, **kwargs):
        self.scans = 0
        for k, v in kwargs.items():
            if k in self.ALLOWED_COLUMNS:
                setattr(self, k, v)

    def to_dict(self):
        data = {}
        for k in self.ALLOWED_COLUMNS:
            v = getattr(self, k, None)
            if isinstance(v, datetime):
                v = v.isoformat()
            data[k] = v
        return data

    @classmethod
    def get(cls, qr_code_id, shop=None):
        db = get_db()
        if shop is None:
            row = db.execute("SELECT * FROM qr_codes WHERE id = %s", (qr_code_id,)).fetchone()
        else:
            row = db.execute(
                "SELECT * FROM qr_codes WHERE id = %s AND shop = %s", (qr_code_id, shop)
            ).fetchone()
        if not row: return None
        return cls(**dict(row))

    @classmethod
    def list_for_shop(cls, shop):
        db = get_db()
        rows = db.execute(
            "SELECT * FROM qr_codes WHERE shop = %s ORDER BY id DESC", (shop,)
        ).fetchall()
        return [cls(**dict(r)) for r in rows]

    @staticmethod
    def _writable(data):
        return {k: data[k] for k in QR_CODE_WRITABLE_FIELDS if k in data}

    @classmethod
    def create(cls, data):
        db = get_db()
        fields = cls._writable(data)
        for column, default in QR_CODE_OPTIONAL_DEFAULTS.items():
            fields.setdefault(column, default)
        cols = ", ".join(fields)
        placeholders = ", ".join(["%s"] * len(fields))
        row = db.execute(
            f"INSERT INTO qr_codes ({cols}) VALUES ({placeholders}) RETURNING *",
            tuple(fields.values())
        ).fetchone()
        db.commit()
        return cls(**dict(row))

    @classmethod
    def update(cls, qr_code_id, data, shop):
        """Returns the updated record, or None when no row matched."""
        db = get_db()
        fields = cls._writable(data)
        fields.pop('shop', None)
        if not fields:
            return cls.get(qr_code_id, shop=shop)
        assignments = ", ".join(f"{k} = %s" for k in fields)
        row = db.execute(
            f"UPDATE qr_codes SET {assignments} WHERE id = %s AND shop = %s RETURNING *",
            tuple(fields.values()) + (qr_code_id, shop)
        ).fetchone()
        db.commit()
        if not row: return None
        return cls(**dict(row))

    @staticmethod
    def delete(qr_code_id, shop):
        db = get_db()
        cur = db.execute("DELETE FROM qr_codes WHERE id = %s AND shop = %s", (qr_code_id, shop))
        db.commit()
        return cur.rowcount > 0

    @staticmethod
    def increment_scans(qr_code_id):
        db = get_db()
        db.execute("UPDATE qr_codes SET scans = scans + 1 WHERE id = %s", (qr_code_id,))
        db.commit()
