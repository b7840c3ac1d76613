import structlog
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from reliefhub.errors import Forbidden, NotFound, ValidationFailed
from reliefhub.models import Donation, DonationStatus, ResourceCategory
from reliefhub.schemas import DonationIn, Principal
from reliefhub.utils import utcnow

log = structlog.get_logger(__name__)


def list_categories(db: Session) -> list[ResourceCategory]:
    return db.query(ResourceCategory).order_by(ResourceCategory.name).all()


def ensure_categories(db: Session, names: list[str]) -> int:
    """Insert any missing lookup categories; returns how many were added."""
    existing = {name for (name,) in db.query(ResourceCategory.name).all()}
    added = 0
    for name in names:
        if name in existing:
            continue
        db.add(ResourceCategory(name=name, description=f"{name} items"))
        existing.add(name)
        added += 1
    if added:
        db.commit()
    return added


def donate(db: Session, payload: DonationIn, principal: Principal) -> Donation:
    if db.get(ResourceCategory, payload.category_id) is None:
        raise ValidationFailed({"category_id": "Unknown resource category"})

    donation = Donation(
        **payload.model_dump(),
        donor_id=principal.user_id,
        status=DonationStatus.PENDING,
        donated_at=utcnow(),
    )
    db.add(donation)
    db.commit()
    db.refresh(donation)
    log.info("donation_recorded", donation_id=donation.id, quantity=donation.quantity)
    return donation


def my_donations(db: Session, principal: Principal) -> list[Donation]:
    return (
        db.query(Donation)
        .options(joinedload(Donation.category))
        .filter(Donation.donor_id == principal.user_id)
        .order_by(Donation.donated_at.desc())
        .all()
    )


def all_donations(db: Session) -> list[Donation]:
    return (
        db.query(Donation)
        .options(joinedload(Donation.donor), joinedload(Donation.category))
        .order_by(Donation.donated_at.desc())
        .all()
    )


def set_status(donation: Donation, status: DonationStatus) -> None:
    # received_at tracks exactly the Received state
    if status is DonationStatus.RECEIVED and donation.status is not DonationStatus.RECEIVED:
        donation.received_at = utcnow()
    elif status is not DonationStatus.RECEIVED:
        donation.received_at = None
    donation.status = status


def mark_received(db: Session, donation_id: str, principal: Principal) -> Donation:
    if not principal.is_admin:
        raise Forbidden("Only administrators can receive donations")
    donation = db.get(Donation, donation_id)
    if donation is None:
        raise NotFound("Donation not found")
    set_status(donation, DonationStatus.RECEIVED)
    db.commit()
    db.refresh(donation)
    log.info("donation_received", donation_id=donation.id)
    return donation


def donor_total_quantity(db: Session, donor_id: str) -> int:
    total = db.query(func.sum(Donation.quantity)).filter(Donation.donor_id == donor_id).scalar()
    return int(total or 0)
