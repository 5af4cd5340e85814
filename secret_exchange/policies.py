from __future__ import annotations

from flask import request
from flask.views import MethodView
from flask_login import current_user

from .errors import NotFound, Unauthorized
from .models import Event
from .security import bearer_token


def current_event() -> Event:
    """The event whose organizer token authenticated this request."""
    if not current_user.is_authenticated:
        if bearer_token(request):
            raise NotFound("Event not found for this token")
        raise Unauthorized()
    return current_user._get_current_object()


def owned_event(event_id: str) -> Event:
    event = current_event()
    if event.id != event_id:
        # Same answer as a missing event: a token reveals nothing about other events.
        raise NotFound("Event not found or unauthorized")
    return event


# --------- Class-based view Mixins ----------

class OrganizerRequiredMixin(MethodView):
    def dispatch_request(self, *args, **kwargs):
        current_event()
        return super().dispatch_request(*args, **kwargs)


class EventOwnerMixin(OrganizerRequiredMixin):
    """Resolves the `event_id` URL argument to the organizer's own event."""
    def dispatch_request(self, event_id: str, **kwargs):
        return super().dispatch_request(event=owned_event(event_id), **kwargs)
