from __future__ import annotations

from ..extensions import db
from mams.time_utils import to_utc_z, utcnow


class Asset(db.Model):
    """
    A category of equipment held at one base, with its running balances.

    Balance invariant (kept by the movement services, see recalculate()):
        closing_balance = opening_balance + purchases + transfer_in
                          - transfer_out - expended
        available       = closing_balance - assigned
    """
    __tablename__ = "assets"
    __table_args__ = (
        db.UniqueConstraint("name", "type", "base", name="uq_assets_name_type_base"),
        db.Index("ix_assets_base_type", "base", "type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    type = db.Column(db.String(64), nullable=False, index=True)
    base = db.Column(db.String(128), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)

    opening_balance = db.Column(db.Integer, nullable=False, default=0)
    closing_balance = db.Column(db.Integer, nullable=False, default=0)
    purchases = db.Column(db.Integer, nullable=False, default=0)
    transfer_in = db.Column(db.Integer, nullable=False, default=0)
    transfer_out = db.Column(db.Integer, nullable=False, default=0)
    assigned = db.Column(db.Integer, nullable=False, default=0)
    expended = db.Column(db.Integer, nullable=False, default=0)
    available = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def recalculate(self) -> None:
        self.closing_balance = (
            (self.opening_balance or 0)
            + (self.purchases or 0)
            + (self.transfer_in or 0)
            - (self.transfer_out or 0)
            - (self.expended or 0)
        )
        self.available = self.closing_balance - (self.assigned or 0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "base": self.base,
            "description": self.description,
            "opening_balance": self.opening_balance,
            "closing_balance": self.closing_balance,
            "purchases": self.purchases,
            "transfer_in": self.transfer_in,
            "transfer_out": self.transfer_out,
            "assigned": self.assigned,
            "expended": self.expended,
            "available": self.available,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
