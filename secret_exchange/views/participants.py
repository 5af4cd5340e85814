from __future__ import annotations

from flask import Blueprint, jsonify
from flask.views import MethodView

from ..errors import NotFound, Unauthorized
from ..extensions import db
from ..forms import LoginForm, WishlistItemForm, validated
from ..models import Event
from ..services import events as event_service
from ..services import wishlists as wishlist_service


participants_bp = Blueprint("participants", __name__, url_prefix="/api/participants")


class LoginView(MethodView):
    def post(self):
        form = validated(LoginForm)
        event_id = form.eventId.data.strip()

        p = event_service.authenticate(event_id, form.email.data)
        if p is None:
            raise Unauthorized("Invalid credentials or event")

        event = db.session.get(Event, event_id)
        return jsonify({
            "message": "Login successful",
            "secretId": p.private_id,
            "publicId": p.exchange_id,
            "event": event.to_dict() if event else None,
        })


class AssignmentView(MethodView):
    def get(self, private_id: str):
        p = event_service.participant_for_private_id(private_id)
        receiver_id = event_service.assignment_for(p)
        if receiver_id is None:
            raise NotFound("Assignment not yet finalized")
        return jsonify({
            "yourSecretId": p.private_id,
            "yourPublicId": p.exchange_id,
            "receiverPublicId": receiver_id,
            "message": "Your Secret ID stays private. Your Santa only knows your Public ID.",
        })


class WishlistView(MethodView):
    def get(self, private_id: str):
        p = event_service.participant_for_private_id(private_id)
        return jsonify({"items": [i.to_dict() for i in wishlist_service.list_items(p)]})

    def post(self, private_id: str):
        p = event_service.participant_for_private_id(private_id)
        form = validated(WishlistItemForm)
        item = wishlist_service.add_item(p, form.item.data)
        return jsonify({"item": item.to_dict()}), 201


class WishlistItemView(MethodView):
    def delete(self, private_id: str, item_id: int):
        p = event_service.participant_for_private_id(private_id)
        wishlist_service.delete_item(p, item_id)
        return "", 204


class ReceiverWishlistView(MethodView):
    def get(self, private_id: str):
        p = event_service.participant_for_private_id(private_id)
        receiver_id, items = wishlist_service.receiver_items(p)
        return jsonify({"receiverPublicId": receiver_id, "items": [i.to_dict() for i in items]})


participants_bp.add_url_rule("/login", view_func=LoginView.as_view("login"), methods=["POST"])
participants_bp.add_url_rule("/<private_id>/assignment", view_func=AssignmentView.as_view("assignment"))
participants_bp.add_url_rule("/<private_id>/wishlist", view_func=WishlistView.as_view("wishlist"), methods=["GET", "POST"])
participants_bp.add_url_rule(
    "/<private_id>/wishlist/<int:item_id>",
    view_func=WishlistItemView.as_view("wishlist_item"),
    methods=["DELETE"],
)
participants_bp.add_url_rule(
    "/<private_id>/receiver-wishlist",
    view_func=ReceiverWishlistView.as_view("receiver_wishlist"),
)
