import structlog
from sqlalchemy.orm import Session, joinedload

from reliefhub.errors import Forbidden, NotFound
from reliefhub.models import DisasterIncident, IncidentStatus
from reliefhub.schemas import IncidentIn, Principal
from reliefhub.utils import utcnow

log = structlog.get_logger(__name__)


def report(db: Session, payload: IncidentIn, principal: Principal) -> DisasterIncident:
    now = utcnow()
    incident = DisasterIncident(
        **payload.model_dump(),
        reporter_id=principal.user_id,
        status=IncidentStatus.REPORTED,
        reported_at=now,
        updated_at=now,
    )
    db.add(incident)
    db.commit()
    db.refresh(incident)
    log.info("incident_reported", incident_id=incident.id, severity=incident.severity.value)
    return incident


def list_incidents(db: Session) -> list[DisasterIncident]:
    return (
        db.query(DisasterIncident)
        .options(joinedload(DisasterIncident.reporter))
        .order_by(DisasterIncident.reported_at.desc())
        .all()
    )


def details(db: Session, incident_id: str) -> DisasterIncident:
    incident = (
        db.query(DisasterIncident)
        .options(joinedload(DisasterIncident.reporter))
        .filter(DisasterIncident.id == incident_id)
        .one_or_none()
    )
    if incident is None:
        raise NotFound("Incident not found")
    return incident


def update_status(db: Session, incident_id: str, status: IncidentStatus, principal: Principal) -> DisasterIncident:
    if not principal.is_admin:
        raise Forbidden("Only administrators can change incident status")
    incident = details(db, incident_id)
    incident.status = status
    incident.updated_at = utcnow()
    db.commit()
    db.refresh(incident)
    log.info("incident_status_changed", incident_id=incident.id, status=status.value)
    return incident
