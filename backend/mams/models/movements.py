from __future__ import annotations

from ..extensions import db
from mams.time_utils import to_utc_z, utcnow


TRANSFER_STATUS_PENDING = "Pending"
TRANSFER_STATUS_COMPLETED = "Completed"
TRANSFER_STATUS_CANCELLED = "Cancelled"
TRANSFER_STATUSES = (TRANSFER_STATUS_PENDING, TRANSFER_STATUS_COMPLETED, TRANSFER_STATUS_CANCELLED)

PURCHASE_STATUS_PENDING = "Pending"
PURCHASE_STATUS_APPROVED = "Approved"
PURCHASE_STATUS_CANCELLED = "Cancelled"
PURCHASE_STATUSES = (PURCHASE_STATUS_PENDING, PURCHASE_STATUS_APPROVED, PURCHASE_STATUS_CANCELLED)

ASSIGNMENT_STATUS_ACTIVE = "Active"
ASSIGNMENT_STATUS_RETURNED = "Returned"
ASSIGNMENT_STATUSES = (ASSIGNMENT_STATUS_ACTIVE, ASSIGNMENT_STATUS_RETURNED)


def _user_ref(user):
    return user.to_ref() if user else None


def _asset_fields(asset) -> dict:
    return {
        "asset_name": asset.name if asset else None,
        "asset_type": asset.type if asset else None,
    }


class Transfer(db.Model):
    """
    Movement of stock for one asset from one base to another.

    Balances only move when the transfer is completed (see transfer_service).
    """
    __tablename__ = "transfers"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_transfers_quantity_positive"),
        db.Index("ix_transfers_from_base_created", "from_base", "created_at"),
        db.Index("ix_transfers_to_base_created", "to_base", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey("assets.id"), nullable=False, index=True)
    from_base = db.Column(db.String(128), nullable=False)
    to_base = db.Column(db.String(128), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), nullable=False, default=TRANSFER_STATUS_PENDING, index=True)
    notes = db.Column(db.Text, nullable=True)

    transferred_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    approved_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    asset = db.relationship("Asset", backref=db.backref("transfers", lazy=True))
    transferred_by = db.relationship("User", foreign_keys=[transferred_by_id])
    approved_by = db.relationship("User", foreign_keys=[approved_by_id])

    def to_dict(self, with_users: bool = False) -> dict:
        data = {
            "id": self.id,
            "asset_id": self.asset_id,
            **_asset_fields(self.asset),
            "from_base": self.from_base,
            "to_base": self.to_base,
            "quantity": self.quantity,
            "status": self.status,
            "notes": self.notes,
            "transferred_by_id": self.transferred_by_id,
            "approved_by_id": self.approved_by_id,
            "created_at": to_utc_z(self.created_at),
            "completed_at": to_utc_z(self.completed_at) if self.completed_at else None,
        }
        if with_users:
            data["transferred_by"] = _user_ref(self.transferred_by)
            data["approved_by"] = _user_ref(self.approved_by)
        return data


class Purchase(db.Model):
    """Purchase of stock for an asset at its base; counted once approved."""
    __tablename__ = "purchases"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_purchases_quantity_positive"),
        db.Index("ix_purchases_base_date", "base", "purchase_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey("assets.id"), nullable=False, index=True)
    base = db.Column(db.String(128), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_cost = db.Column(db.Numeric(12, 2), nullable=True)
    supplier = db.Column(db.String(255), nullable=True)
    status = db.Column(db.String(16), nullable=False, default=PURCHASE_STATUS_PENDING, index=True)

    purchased_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    approved_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    purchase_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    asset = db.relationship("Asset", backref=db.backref("purchase_records", lazy=True))
    purchased_by = db.relationship("User", foreign_keys=[purchased_by_id])
    approved_by = db.relationship("User", foreign_keys=[approved_by_id])

    def to_dict(self, with_users: bool = False) -> dict:
        data = {
            "id": self.id,
            "asset_id": self.asset_id,
            **_asset_fields(self.asset),
            "base": self.base,
            "quantity": self.quantity,
            "unit_cost": float(self.unit_cost) if self.unit_cost is not None else None,
            "supplier": self.supplier,
            "status": self.status,
            "purchased_by_id": self.purchased_by_id,
            "approved_by_id": self.approved_by_id,
            "purchase_date": to_utc_z(self.purchase_date),
            "created_at": to_utc_z(self.created_at),
        }
        if with_users:
            data["purchased_by"] = _user_ref(self.purchased_by)
            data["approved_by"] = _user_ref(self.approved_by)
        return data


class Assignment(db.Model):
    """Stock handed to personnel or a unit; reduces available, not closing balance."""
    __tablename__ = "assignments"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_assignments_quantity_positive"),
        db.Index("ix_assignments_base_start", "base", "start_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey("assets.id"), nullable=False, index=True)
    base = db.Column(db.String(128), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    assigned_to = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=ASSIGNMENT_STATUS_ACTIVE, index=True)
    notes = db.Column(db.Text, nullable=True)

    assigned_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    start_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    end_date = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    asset = db.relationship("Asset", backref=db.backref("assignments", lazy=True))
    assigned_by = db.relationship("User", foreign_keys=[assigned_by_id])

    def to_dict(self, with_users: bool = False) -> dict:
        data = {
            "id": self.id,
            "asset_id": self.asset_id,
            **_asset_fields(self.asset),
            "base": self.base,
            "quantity": self.quantity,
            "assigned_to": self.assigned_to,
            "status": self.status,
            "notes": self.notes,
            "assigned_by_id": self.assigned_by_id,
            "start_date": to_utc_z(self.start_date),
            "end_date": to_utc_z(self.end_date) if self.end_date else None,
            "created_at": to_utc_z(self.created_at),
        }
        if with_users:
            data["assigned_by"] = _user_ref(self.assigned_by)
        return data


class Expenditure(db.Model):
    """Stock consumed or written off at a base."""
    __tablename__ = "expenditures"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_expenditures_quantity_positive"),
        db.Index("ix_expenditures_base_date", "base", "expenditure_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey("assets.id"), nullable=False, index=True)
    base = db.Column(db.String(128), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.Text, nullable=False)

    authorized_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    expenditure_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    asset = db.relationship("Asset", backref=db.backref("expenditures", lazy=True))
    authorized_by = db.relationship("User", foreign_keys=[authorized_by_id])

    def to_dict(self, with_users: bool = False) -> dict:
        data = {
            "id": self.id,
            "asset_id": self.asset_id,
            **_asset_fields(self.asset),
            "base": self.base,
            "quantity": self.quantity,
            "reason": self.reason,
            "authorized_by_id": self.authorized_by_id,
            "expenditure_date": to_utc_z(self.expenditure_date),
            "created_at": to_utc_z(self.created_at),
        }
        if with_users:
            data["authorized_by"] = _user_ref(self.authorized_by)
        return data
