from __future__ import annotations

from ..extensions import db
from stockroom.time_utils import to_utc_z, utcnow

class User(db.Model):
    """
    The administrator credential.

    Exactly one row is expected in steady state; it is provisioned on first
    run and only mutated by a password change.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("username", name="uq_users_username"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(255), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "created_at": to_utc_z(self.created_at),
        }
