from __future__ import annotations

from ..extensions import db
from ..money import from_cents
from ..time_utils import to_utc_z, utcnow


class Vendor(db.Model):
    """
    Supplier from whom products are purchased and to whom payments are made.

    Balance is never stored here; it is derived from purchases and
    vendor_payments on every read (see balance_service).
    """
    __tablename__ = "vendors"
    __table_args__ = (
        db.Index("ix_vendors_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)

    # Contact information
    contact_name = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(64), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)

    gst_number = db.Column(db.String(32), nullable=True)
    payment_terms_days = db.Column(db.Integer, nullable=False, default=30)

    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def __repr__(self) -> str:
        return f"<Vendor id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contact_name": self.contact_name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "gst_number": self.gst_number,
            "payment_terms_days": self.payment_terms_days,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Purchase(db.Model):
    """
    One delivery of one product from one vendor.

    APPEND-ONLY: there is no update path. A data-entry mistake is reversed by
    deleting the row, which also reverses the stock it added.

    Every delivery is its own row, even for the same vendor+product+day, so
    daily deliveries stay individually auditable.
    """
    __tablename__ = "purchases"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_purchases_quantity_positive"),
        db.CheckConstraint("unit_price_cents > 0", name="ck_purchases_price_positive"),
        db.Index("ix_purchases_vendor_purchased", "vendor_id", "purchased_at"),
        db.Index("ix_purchases_product_purchased", "product_id", "purchased_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)

    # Business time of the delivery (UTC-naive); set by the app so
    # same-second rows still order deterministically
    purchased_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    vendor = db.relationship("Vendor", backref=db.backref("purchases", lazy=True))
    product = db.relationship("Product", backref=db.backref("purchases", lazy=True))

    @property
    def total_cents(self) -> int:
        return self.quantity * self.unit_price_cents

    def __repr__(self) -> str:
        return f"<Purchase id={self.id} vendor_id={self.vendor_id} product_id={self.product_id} qty={self.quantity}>"

    def to_dict(self, *, include_names: bool = False) -> dict:
        data = {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price": from_cents(self.unit_price_cents),
            "total": from_cents(self.total_cents),
            "purchased_at": to_utc_z(self.purchased_at),
        }
        if include_names:
            data["vendor_name"] = self.vendor.name if self.vendor else None
            data["product_name"] = self.product.name if self.product else None
            data["product_barcode"] = self.product.barcode if self.product else None
        return data


class VendorPayment(db.Model):
    """
    One payment made to a vendor.

    Payments never touch stock or product state; deleting one only removes
    its contribution to the vendor's total payments.
    """
    __tablename__ = "vendor_payments"
    __table_args__ = (
        db.CheckConstraint("amount_cents > 0", name="ck_vendor_payments_amount_positive"),
        db.Index("ix_vendor_payments_vendor_date", "vendor_id", "payment_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=False, index=True)

    amount_cents = db.Column(db.Integer, nullable=False)
    payment_mode = db.Column(db.String(32), nullable=False, default="cash")

    reference_number = db.Column(db.String(128), nullable=True)
    transaction_id = db.Column(db.String(128), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    payment_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    vendor = db.relationship("Vendor", backref=db.backref("payments", lazy=True))

    def __repr__(self) -> str:
        return f"<VendorPayment id={self.id} vendor_id={self.vendor_id} amount_cents={self.amount_cents}>"

    def to_dict(self, *, include_vendor_name: bool = False) -> dict:
        data = {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "amount": from_cents(self.amount_cents),
            "payment_mode": self.payment_mode,
            "reference_number": self.reference_number,
            "transaction_id": self.transaction_id,
            "notes": self.notes,
            "payment_date": to_utc_z(self.payment_date),
            "created_at": to_utc_z(self.created_at),
        }
        if include_vendor_name:
            data["vendor_name"] = self.vendor.name if self.vendor else None
        return data
