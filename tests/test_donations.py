"""
Donation intake workflow
"""
from datetime import timedelta

import pytest

from reliefhub.errors import Forbidden, NotFound, ValidationFailed
from reliefhub.models import Donation, DonationStatus, ResourceCategory, Role
from reliefhub.schemas import DonationIn
from reliefhub.services import donations


def _donation(category_id: str, **overrides) -> DonationIn:
    data = {
        "category_id": category_id,
        "item_name": "Bottled water",
        "quantity": 10,
        "description": "Sealed 1L bottles",
        "donation_type": "Goods",
    }
    data.update(overrides)
    return DonationIn.model_validate(data)


def test_donate_starts_pending(db_session, make_user, category, as_principal):
    donor = make_user(Role.DONOR)

    donation = donations.donate(db_session, _donation(category.id), as_principal(donor))

    assert donation.donor_id == donor.id
    assert donation.status is DonationStatus.PENDING
    assert donation.donated_at is not None
    assert donation.received_at is None


def test_unknown_category_is_a_validation_error(db_session, volunteer, as_principal):
    with pytest.raises(ValidationFailed) as exc:
        donations.donate(db_session, _donation("missing"), as_principal(volunteer))
    assert "category_id" in exc.value.errors
    assert db_session.query(Donation).count() == 0


def test_quantity_must_be_positive(category):
    with pytest.raises(ValueError):
        _donation(category.id, quantity=0)


def test_donor_total_quantity(db_session, make_user, category, as_principal):
    donor, other = make_user(Role.DONOR), make_user(Role.DONOR)
    for _ in range(3):
        donations.donate(db_session, _donation(category.id, quantity=10), as_principal(donor))
    donations.donate(db_session, _donation(category.id, quantity=7), as_principal(other))

    assert donations.donor_total_quantity(db_session, donor.id) == 30
    assert donations.donor_total_quantity(db_session, "nobody") == 0


def test_my_donations_only_lists_own_newest_first(db_session, make_user, category, as_principal):
    donor, other = make_user(Role.DONOR), make_user(Role.DONOR)
    first = donations.donate(db_session, _donation(category.id, item_name="Blankets"), as_principal(donor))
    second = donations.donate(db_session, _donation(category.id, item_name="Tents"), as_principal(donor))
    donations.donate(db_session, _donation(category.id, item_name="Rice"), as_principal(other))
    first.donated_at = second.donated_at - timedelta(minutes=5)
    db_session.commit()

    rows = donations.my_donations(db_session, as_principal(donor))

    assert [d.item_name for d in rows] == ["Tents", "Blankets"]
    assert rows[0].category.name == category.name
    assert len(donations.all_donations(db_session)) == 3


def test_mark_received_sets_received_at(db_session, make_user, admin, category, as_principal):
    donor = make_user(Role.DONOR)
    donation = donations.donate(db_session, _donation(category.id), as_principal(donor))

    with pytest.raises(Forbidden):
        donations.mark_received(db_session, donation.id, as_principal(donor))

    received = donations.mark_received(db_session, donation.id, as_principal(admin))
    assert received.status is DonationStatus.RECEIVED
    assert received.received_at is not None


def test_mark_received_missing_donation(db_session, admin, as_principal):
    with pytest.raises(NotFound):
        donations.mark_received(db_session, "missing", as_principal(admin))


def test_received_at_follows_received_status(db_session, make_user, category, as_principal):
    donation = donations.donate(db_session, _donation(category.id), as_principal(make_user(Role.DONOR)))

    donations.set_status(donation, DonationStatus.PROCESSING)
    assert donation.received_at is None

    donations.set_status(donation, DonationStatus.RECEIVED)
    stamped = donation.received_at
    assert stamped is not None

    # already received: timestamp is kept
    donations.set_status(donation, DonationStatus.RECEIVED)
    assert donation.received_at == stamped

    donations.set_status(donation, DonationStatus.PENDING)
    assert donation.received_at is None


def test_ensure_categories_is_idempotent(db_session):
    assert donations.ensure_categories(db_session, ["Food", "Medical"]) == 2
    assert donations.ensure_categories(db_session, ["Food", "Medical", "Water"]) == 1
    names = [c.name for c in donations.list_categories(db_session)]
    assert names == ["Food", "Medical", "Water"]
    assert db_session.query(ResourceCategory).count() == 3
