from __future__ import annotations

from ..extensions import db


class DataSlot(db.Model):
    """
    One named collection in the key-value store.

    The whole application state is four JSON arrays (inventory, issues,
    employees, categories) plus the registered user accounts. Each lives in
    its own row keyed by its logical name and is always overwritten in full.
    """
    __tablename__ = "data_slots"

    key = db.Column(db.String(64), primary_key=True)
    value_json = db.Column(db.JSON, nullable=False, default=list)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<DataSlot key={self.key!r}>"
