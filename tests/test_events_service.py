import pytest

from secret_exchange.core import ExchangeCore
from secret_exchange.errors import AssignmentExhausted, Conflict, ConstraintViolation
from secret_exchange.extensions import db
from secret_exchange.models import Assignment, Event, Participant, WishlistItem
from secret_exchange.security import decrypt_receiver
from secret_exchange.services import events as event_service
from secret_exchange.services import wishlists as wishlist_service
from secret_exchange.services.contacts import ContactMatcher
from secret_exchange.services.derangement import DerangementAssigner
from secret_exchange.services.identifiers import IdentifierGenerator
from secret_exchange.services.roster import RosterRow

from .conftest import IdentityRng, make_app


@pytest.fixture
def party(ctx):
    return event_service.create_event("Winter swap")


def _register(event, *pairs):
    return [event_service.register_participant(event, name, address) for name, address in pairs]


def test_create_event_mints_identifiers(party):
    assert len(party.id) == 36
    assert len(party.organizer_token) == 64
    assert party.finalized is False


def test_register_stores_only_a_salted_hash(party):
    (p,) = _register(party, ("Alice", "alice@x.com"))
    assert "alice" not in p.contact_hash
    assert p.private_id != p.exchange_id
    assert len(p.private_id) == len(p.exchange_id) == 32


def test_duplicate_registration_rejected(party):
    _register(party, ("Alice", "a@x.com"))
    with pytest.raises(Conflict):
        event_service.register_participant(party, "Alice again", "a@x.com")
    assert Participant.query.filter_by(event_id=party.id).count() == 1


def test_duplicate_check_normalizes_case_and_whitespace(party):
    _register(party, ("Alice", "a@x.com"))
    with pytest.raises(Conflict):
        event_service.register_participant(party, "Alice", "  A@X.com ")


def test_same_address_allowed_in_another_event(party):
    other = event_service.create_event("Family swap")
    _register(party, ("Alice", "a@x.com"))
    _register(other, ("Alice", "a@x.com"))
    assert Participant.query.count() == 2


def test_bulk_dedups_against_roster_and_batch(party):
    _register(party, ("Alice", "a@x.com"))
    rows = [
        RosterRow("Alice dup", "a@x.com"),
        RosterRow("Bob", "b@x.com"),
        RosterRow("Bob dup", "B@x.com"),
        RosterRow("Carol", "c@x.com"),
    ]
    result = event_service.register_many(party, rows)

    assert [p.real_name for p in result.added] == ["Bob", "Carol"]
    assert result.duplicates == ["a@x.com", "B@x.com"]
    assert Participant.query.filter_by(event_id=party.id).count() == 3


def test_authenticate_scans_roster(party):
    alice, bob = _register(party, ("Alice", "a@x.com"), ("Bob", "b@x.com"))
    assert event_service.authenticate(party.id, "b@x.com") == bob
    assert event_service.authenticate(party.id, "A@x.com") == alice
    assert event_service.authenticate(party.id, "nobody@x.com") is None
    assert event_service.authenticate("no-such-event", "a@x.com") is None


def test_finalize_persists_encrypted_derangement(party):
    people = _register(party, ("A", "a@x.com"), ("B", "b@x.com"), ("C", "c@x.com"), ("D", "d@x.com"))

    assert event_service.finalize_event(party) == 4
    assert db.session.get(Event, party.id).finalized is True

    rows = Assignment.query.filter_by(event_id=party.id).all()
    exchange_ids = {p.exchange_id for p in people}
    mapping = {r.giver_id: decrypt_receiver(r.receiver_ciphertext) for r in rows}

    assert set(mapping) == exchange_ids
    assert set(mapping.values()) == exchange_ids
    assert all(g != r for g, r in mapping.items())
    assert all(r.receiver_ciphertext not in exchange_ids for r in rows)

    for p in people:
        assert event_service.assignment_for(p) == mapping[p.exchange_id]


def test_finalize_twice_is_refused(party):
    _register(party, ("A", "a@x.com"), ("B", "b@x.com"))
    event_service.finalize_event(party)
    with pytest.raises(Conflict):
        event_service.finalize_event(party)
    assert event_service.assignment_count(party) == 2


def test_no_registration_after_finalize(party):
    _register(party, ("A", "a@x.com"), ("B", "b@x.com"))
    event_service.finalize_event(party)
    with pytest.raises(Conflict):
        event_service.register_participant(party, "Late", "late@x.com")
    with pytest.raises(Conflict):
        event_service.register_many(party, [RosterRow("Late", "late@x.com")])


def test_finalize_single_participant_is_constraint_violation(party):
    _register(party, ("A", "a@x.com"))
    with pytest.raises(ConstraintViolation):
        event_service.finalize_event(party)
    assert db.session.get(Event, party.id).finalized is False
    assert event_service.assignment_count(party) == 0


def test_assignment_before_finalize_is_none(party):
    (p,) = _register(party, ("A", "a@x.com"))
    assert event_service.assignment_for(p) is None


def test_delete_event_cascades(party):
    a, b = _register(party, ("A", "a@x.com"), ("B", "b@x.com"))
    wishlist_service.add_item(a, "socks")
    event_service.finalize_event(party)
    event_id = party.id

    event_service.delete_event(party)

    assert db.session.get(Event, event_id) is None
    assert Participant.query.count() == 0
    assert Assignment.query.count() == 0
    assert WishlistItem.query.count() == 0


def test_exhausted_assigner_writes_nothing():
    core = ExchangeCore(
        identifiers=IdentifierGenerator(),
        contacts=ContactMatcher(rounds=1, memory_cost=64),
        assigner=DerangementAssigner(rng=IdentityRng(), max_attempts=5),
    )
    app = make_app(core=core)
    with app.app_context():
        db.create_all()
        event = event_service.create_event("Unlucky")
        _register(event, ("A", "a@x.com"), ("B", "b@x.com"), ("C", "c@x.com"))

        with pytest.raises(AssignmentExhausted):
            event_service.finalize_event(event)

        assert Assignment.query.count() == 0
        assert db.session.get(Event, event.id).finalized is False
        db.session.remove()
        db.drop_all()


def test_contact_hash_is_never_indexed():
    # An index (or unique constraint) on the salted hash cannot find duplicates
    # and invites replacing it with a deterministic digest that leaks equality.
    table = Participant.__table__
    assert not table.c.contact_hash.index
    assert not table.c.contact_hash.unique
    assert all("contact_hash" not in ix.columns for ix in table.indexes)
