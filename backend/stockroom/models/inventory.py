from __future__ import annotations

from ..extensions import db
from stockroom.time_utils import format_date, format_timestamp

# Allowed refill dispositions; "" means not set
REFILL_STATUSES = ("", "X", "YES", "HOLYSHEEP", "RETURN", "CHOICE")


class InventoryRecord(db.Model):
    """
    One row per delivered or counted item batch.

    Write-once: id, recorded_by, created_at.
    Overwritten on every update: updated_at, edited_by.
    """
    __tablename__ = "inventory"
    __table_args__ = (
        db.Index("ix_inventory_item_code", "item_code"),
        db.Index("ix_inventory_delivery_no", "delivery_no"),
        db.Index("ix_inventory_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Delivery
    delivery_date = db.Column(db.Date, nullable=True)
    delivery_no = db.Column(db.String(100), nullable=True)
    supplier_name = db.Column(db.String(255), nullable=True)
    delivery_details = db.Column(db.Text, nullable=True)
    stockman = db.Column(db.String(255), nullable=True)

    # Item
    item_description = db.Column(db.Text, nullable=False)
    item_code = db.Column(db.String(100), nullable=True)
    color = db.Column(db.String(100), nullable=True)
    qty = db.Column(db.Integer, nullable=True)
    storage = db.Column(db.String(255), nullable=True)

    # Counting
    counted_by = db.Column(db.String(255), nullable=True)
    date_counted = db.Column(db.Date, nullable=True)

    # Attribution
    recorded_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    edited_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Refill workflow
    refill_status = db.Column(db.String(16), nullable=True, default="")
    date_of_refill = db.Column(db.Date, nullable=True)
    refill_by = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "delivery_date": format_date(self.delivery_date),
            "delivery_no": self.delivery_no,
            "supplier_name": self.supplier_name,
            "delivery_details": self.delivery_details,
            "stockman": self.stockman,
            "item_description": self.item_description,
            "item_code": self.item_code,
            "qty": self.qty,
            "color": self.color,
            "storage": self.storage,
            "date_counted": format_date(self.date_counted),
            "counted_by": self.counted_by or "",
            "recorded_by": self.recorded_by,
            "edited_by": self.edited_by,
            "refill_status": self.refill_status or "",
            "date_of_refill": format_date(self.date_of_refill),
            "refill_by": self.refill_by or "",
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }
