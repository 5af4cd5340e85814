from datetime import datetime
from flask_login import UserMixin
from .extensions import db, login_manager
from .security import bearer_token


class Event(UserMixin, db.Model):
    """
    A gift exchange. The organizer token is the only credential that may
    change it; the event itself is the Flask-Login principal for organizers.
    """
    __tablename__ = "events"

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    organizer_token = db.Column(db.String(64), unique=True, nullable=False)
    event_date = db.Column(db.DateTime, nullable=True)
    budget = db.Column(db.Numeric(10, 2), nullable=True)
    description = db.Column(db.String(200), nullable=True)
    finalized = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    participants = db.relationship(
        "Participant", back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )
    assignments = db.relationship(
        "Assignment", back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )
    wishlist_items = db.relationship(
        "WishlistItem", back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "finalized": self.finalized,
            "event_date": self.event_date.isoformat() if self.event_date else None,
            "budget": str(self.budget) if self.budget is not None else None,
            "description": self.description,
        }


class Participant(db.Model):
    __tablename__ = "participants"

    id = db.Column(db.Integer, primary_key=True)
    real_name = db.Column(db.String(255), nullable=False)

    # Salted argon2 hash of the contact address. Never indexed: see services.contacts.
    contact_hash = db.Column(db.String(255), nullable=False)

    # Known only to the participant.
    private_id = db.Column(db.String(32), unique=True, nullable=False, index=True)
    # Shown to whoever gives to this participant.
    exchange_id = db.Column(db.String(32), unique=True, nullable=False, index=True)

    event_id = db.Column(db.String(36), db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    event = db.relationship("Event", back_populates="participants")

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class Assignment(db.Model):
    __tablename__ = "assignments"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.String(36), db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    event = db.relationship("Event", back_populates="assignments")

    giver_id = db.Column(db.String(32), db.ForeignKey("participants.exchange_id"), nullable=False, index=True)

    # Encrypted receiver exchange id (Fernet token string).
    receiver_ciphertext = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("event_id", "giver_id", name="uq_assignment_event_giver"),
    )


class WishlistItem(db.Model):
    __tablename__ = "wishlists"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.String(36), db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    event = db.relationship("Event", back_populates="wishlist_items")

    owner_exchange_id = db.Column(
        db.String(32), db.ForeignKey("participants.exchange_id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_text = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_text": self.item_text,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@login_manager.request_loader
def load_event_from_request(request):
    token = bearer_token(request)
    if not token:
        return None
    return Event.query.filter_by(organizer_token=token).first()
