from __future__ import annotations

from ..extensions import db
from ..money import from_cents
from ..time_utils import to_utc_z


class Product(db.Model):
    """
    Product master data.

    STOCK: stock is a stored counter. It is only changed through
    products_service (manual adjust/set), purchase_service (purchase
    create/delete) and billing_service (sales), always inside the same
    DB transaction as the event that caused it. version_id guards against
    lost updates between concurrent writers.

    BARCODE: optional, unique when present. Variable-weight scans resolve
    to the 5-digit item code stored here.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    barcode = db.Column(db.String(64), nullable=True, unique=True, index=True)

    # Authoritative storage in cents (wire format is a decimal)
    price_cents = db.Column(db.Integer, nullable=False, default=0)
    wholesale_price_cents = db.Column(db.Integer, nullable=False, default=0)

    stock = db.Column(db.Integer, nullable=False, default=0)

    # GST in basis points (1800 = 18%); wire format is a percent
    gst_rate_bps = db.Column(db.Integer, nullable=False, default=1800)
    is_gst_exempt = db.Column(db.Boolean, nullable=False, default=False)

    # Direct vendor assignment (purchases may come from any vendor)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=True, index=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    vendor = db.relationship("Vendor", backref=db.backref("products", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "barcode": self.barcode,
            "price": from_cents(self.price_cents),
            "wholesale_price": from_cents(self.wholesale_price_cents),
            "stock": self.stock,
            "gst_rate": from_cents(self.gst_rate_bps),
            "is_gst_exempt": bool(self.is_gst_exempt),
            "vendor_id": self.vendor_id,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
