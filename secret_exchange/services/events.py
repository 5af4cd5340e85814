from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from ..core import get_core
from ..errors import Conflict, MalformedInput, NotFound
from ..extensions import db
from ..models import Assignment, Event, Participant, WishlistItem
from ..security import decrypt_receiver, encrypt_receiver
from .roster import RosterRow


logger = logging.getLogger(__name__)


@dataclass
class BulkResult:
    added: list[Participant] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)


def normalize_address(address) -> str:
    if not isinstance(address, str):
        raise MalformedInput("Contact address must be text")
    return address.strip().lower()


# --------- Events ----------

def create_event(name: str, event_date=None, budget=None, description: str | None = None) -> Event:
    ids = get_core().identifiers
    event = Event(
        id=ids.new_event_id(),
        name=name,
        organizer_token=ids.new_capability_token(),
        event_date=event_date,
        budget=budget,
        description=description or None,
    )
    db.session.add(event)
    db.session.commit()
    logger.info("Created event %s", event.id)
    return event


def participant_count(event: Event) -> int:
    return Participant.query.filter_by(event_id=event.id).count()


def assignment_count(event: Event) -> int:
    return Assignment.query.filter_by(event_id=event.id).count()


def event_summary(event: Event) -> dict:
    return {"event": event.to_dict(), "participantCount": participant_count(event)}


def delete_event(event: Event) -> None:
    event_id = event.id
    try:
        # Children first: assignments and wishlists reference participants.
        Assignment.query.filter_by(event_id=event_id).delete(synchronize_session=False)
        WishlistItem.query.filter_by(event_id=event_id).delete(synchronize_session=False)
        Participant.query.filter_by(event_id=event_id).delete(synchronize_session=False)
        db.session.delete(event)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info("Deleted event %s", event_id)


# --------- Participants ----------

def _ensure_open(event: Event) -> None:
    if event.finalized:
        raise Conflict("Event is already finalized")


def _roster_hashes(event: Event) -> list[str]:
    return [h for (h,) in db.session.query(Participant.contact_hash).filter_by(event_id=event.id)]


def _new_participant(event: Event, name: str, contact_hash: str) -> Participant:
    ids = get_core().identifiers
    return Participant(
        real_name=name,
        contact_hash=contact_hash,
        private_id=ids.new_private_id(),
        exchange_id=ids.new_public_id(),
        event_id=event.id,
    )


def register_participant(event: Event, name: str, address: str) -> Participant:
    _ensure_open(event)
    contacts = get_core().contacts
    address = normalize_address(address)

    if contacts.is_registered(address, _roster_hashes(event)):
        raise Conflict("Participant with this email already exists for this event")

    p = _new_participant(event, name, contacts.hash(address))
    db.session.add(p)
    db.session.commit()
    logger.info("Registered participant in event %s", event.id)
    return p


def register_many(event: Event, rows: Iterable[RosterRow]) -> BulkResult:
    """
    Registers a batch in one transaction. Each row is checked against the
    existing roster and against rows accepted earlier in the same batch.
    """
    _ensure_open(event)
    contacts = get_core().contacts
    known_hashes = _roster_hashes(event)
    result = BulkResult()

    try:
        for row in rows:
            address = normalize_address(row.address)
            if contacts.is_registered(address, known_hashes):
                result.duplicates.append(row.address)
                continue

            contact_hash = contacts.hash(address)
            p = _new_participant(event, row.name, contact_hash)
            db.session.add(p)
            result.added.append(p)
            known_hashes.append(contact_hash)

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        "Bulk registration for event %s: %d added, %d duplicates",
        event.id, len(result.added), len(result.duplicates),
    )
    return result


def authenticate(event_id: str, address: str) -> Participant | None:
    """Finds the participant of `event_id` registered with `address`, by full scan."""
    address = normalize_address(address)
    roster = Participant.query.filter_by(event_id=event_id).order_by(Participant.id.asc()).all()
    return get_core().contacts.find_match(address, roster, key=lambda p: p.contact_hash)


def participant_for_private_id(private_id: str) -> Participant:
    p = Participant.query.filter_by(private_id=private_id).first()
    if p is None:
        raise NotFound("Participant not found")
    return p


def roster_for_organizer(event: Event) -> list[dict]:
    people = Participant.query.filter_by(event_id=event.id).order_by(Participant.real_name.asc()).all()
    return [{"name": p.real_name, "created_at": p.created_at.isoformat()} for p in people]


# --------- Finalization ----------

def finalize_event(event: Event) -> int:
    """
    Draws the derangement and persists it. All assignment rows and the
    finalized flag are committed together; nothing is written on failure.
    """
    try:
        locked = db.session.execute(
            db.select(Event).filter_by(id=event.id).with_for_update(),
            execution_options={"populate_existing": True},
        ).scalar_one()
        if locked.finalized or assignment_count(locked) > 0:
            raise Conflict("Assignments already finalized")

        people = Participant.query.filter_by(event_id=locked.id).order_by(Participant.id.asc()).all()
        pairs = get_core().assigner.assign(people)

        for giver_id, receiver_id in pairs:
            db.session.add(Assignment(
                event_id=locked.id,
                giver_id=giver_id,
                receiver_ciphertext=encrypt_receiver(receiver_id),
            ))
        db.session.flush()

        locked.finalized = True
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Finalized event %s with %d assignments", event.id, len(pairs))
    return len(pairs)


def assignment_for(participant: Participant) -> str | None:
    """Receiver exchange id for `participant` as giver, or None before finalization."""
    row = Assignment.query.filter_by(event_id=participant.event_id, giver_id=participant.exchange_id).first()
    if row is None:
        return None
    return decrypt_receiver(row.receiver_ciphertext)
