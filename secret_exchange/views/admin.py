from __future__ import annotations

from flask import Blueprint, jsonify
from flask.views import MethodView

from ..errors import InvalidRequest
from ..forms import BulkParticipantsForm, EventForm, ParticipantForm, validated
from ..policies import EventOwnerMixin, OrganizerRequiredMixin, current_event
from ..services import events as event_service
from ..services.roster import parse_roster


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


class EventsView(MethodView):
    def get(self):
        # Token-only lookup: the event associated with the Authorization header.
        return jsonify(event_service.event_summary(current_event()))

    def post(self):
        form = validated(EventForm)
        event = event_service.create_event(
            name=form.name.data.strip(),
            event_date=form.eventDate.data,
            budget=form.budget.data,
            description=(form.description.data or "").strip() or None,
        )
        return jsonify({
            "eventId": event.id,
            "organizerToken": event.organizer_token,
            "message": "Event created. Use this token to manage participants.",
        })


class EventDetailView(EventOwnerMixin):
    def get(self, event):
        return jsonify(event_service.event_summary(event))

    def delete(self, event):
        event_service.delete_event(event)
        return jsonify({"message": "Event and related data deleted"})


class ParticipantsView(EventOwnerMixin):
    def get(self, event):
        return jsonify({"participants": event_service.roster_for_organizer(event)})

    def post(self, event):
        form = validated(ParticipantForm)
        p = event_service.register_participant(event, form.name.data.strip(), form.email.data)
        return jsonify({"message": "Participant added", "secretId": p.private_id, "publicId": p.exchange_id})


class BulkParticipantsView(EventOwnerMixin):
    def post(self, event):
        form = validated(BulkParticipantsForm)
        rows, errors = parse_roster(form.csvData.data)
        if not rows:
            raise InvalidRequest("No valid participants found in CSV", details=errors)

        result = event_service.register_many(event, rows)
        return jsonify({
            "message": "Bulk upload completed",
            "added": len(result.added),
            "skipped": len(result.duplicates),
            "duplicates": result.duplicates,
            "errors": errors,
        })


class FinalizeView(EventOwnerMixin):
    def post(self, event):
        count = event_service.finalize_event(event)
        return jsonify({"message": "Assignments finalized", "count": count})


class StatsView(OrganizerRequiredMixin):
    def get(self):
        return jsonify({"total_assignments": event_service.assignment_count(current_event())})


admin_bp.add_url_rule("/events", view_func=EventsView.as_view("events"), methods=["GET", "POST"])
admin_bp.add_url_rule("/events/<event_id>", view_func=EventDetailView.as_view("event_detail"), methods=["GET", "DELETE"])
admin_bp.add_url_rule("/events/<event_id>/participants", view_func=ParticipantsView.as_view("participants"), methods=["GET", "POST"])
admin_bp.add_url_rule(
    "/events/<event_id>/participants/bulk",
    view_func=BulkParticipantsView.as_view("bulk_participants"),
    methods=["POST"],
)
admin_bp.add_url_rule("/events/<event_id>/finalize", view_func=FinalizeView.as_view("finalize"), methods=["POST"])


assignments_bp = Blueprint("assignments", __name__, url_prefix="/api/assignments")
assignments_bp.add_url_rule("/stats", view_func=StatsView.as_view("stats"))
