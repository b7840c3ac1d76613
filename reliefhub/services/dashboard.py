from sqlalchemy.orm import Session

from reliefhub.models import DisasterIncident, Donation, Role, TaskStatus, User, VolunteerTask
from reliefhub.schemas import DashboardOut

RECENT_INCIDENTS = 3


def summary(db: Session) -> DashboardOut:
    total_incidents = db.query(DisasterIncident).count()
    active_volunteers = (
        db.query(User).filter(User.role == Role.VOLUNTEER, User.is_active == True).count()  # noqa: E712
    )
    total_donations = db.query(Donation).count()
    open_tasks = db.query(VolunteerTask).filter(VolunteerTask.status == TaskStatus.OPEN).count()
    recent = (
        db.query(DisasterIncident)
        .order_by(DisasterIncident.reported_at.desc())
        .limit(RECENT_INCIDENTS)
        .all()
    )
    return DashboardOut(
        total_incidents=int(total_incidents),
        active_volunteers=int(active_volunteers),
        total_donations=int(total_donations),
        open_tasks=int(open_tasks),
        recent_incidents=recent,
    )
