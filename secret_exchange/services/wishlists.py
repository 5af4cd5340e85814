from __future__ import annotations

from ..errors import Forbidden, NotFound
from ..extensions import db
from ..models import Participant, WishlistItem
from .events import assignment_for


def list_items(owner: Participant) -> list[WishlistItem]:
    return (
        WishlistItem.query.filter_by(owner_exchange_id=owner.exchange_id, event_id=owner.event_id)
        .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        .all()
    )


def add_item(owner: Participant, text: str) -> WishlistItem:
    item = WishlistItem(event_id=owner.event_id, owner_exchange_id=owner.exchange_id, item_text=text.strip())
    db.session.add(item)
    db.session.commit()
    return item


def delete_item(owner: Participant, item_id: int) -> None:
    item = db.session.get(WishlistItem, item_id)
    if item is None:
        raise NotFound("Wishlist item not found")
    if item.owner_exchange_id != owner.exchange_id or item.event_id != owner.event_id:
        raise Forbidden("Not authorized to delete this item")
    db.session.delete(item)
    db.session.commit()


def receiver_items(giver: Participant) -> tuple[str, list[WishlistItem]]:
    receiver_id = assignment_for(giver)
    if receiver_id is None:
        raise NotFound("Assignment not yet finalized")
    items = (
        WishlistItem.query.filter_by(owner_exchange_id=receiver_id, event_id=giver.event_id)
        .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        .all()
    )
    return receiver_id, items
