"""Volunteer tasks and assignments.

Joining a task is the only workflow with a real invariant: a task never
holds more volunteers than it asked for, and it moves from Open to
InProgress the moment the last slot is taken. The slot is claimed with a
single guarded UPDATE so two concurrent joins cannot both take the last
slot; the (task, volunteer) unique constraint backs the duplicate check.
"""
from datetime import datetime

import structlog
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from reliefhub.errors import AlreadyAssigned, Forbidden, NotFound, TaskFull, ValidationFailed
from reliefhub.models import (
    AssignmentStatus, DisasterIncident, TaskStatus, VolunteerAssignment, VolunteerTask,
)
from reliefhub.schemas import HoursIn, Principal, TaskIn
from reliefhub.utils import utcnow

log = structlog.get_logger(__name__)


def create_task(db: Session, payload: TaskIn, principal: Principal) -> VolunteerTask:
    if not principal.is_admin:
        raise Forbidden("Only administrators can create volunteer tasks")
    if payload.incident_id and db.get(DisasterIncident, payload.incident_id) is None:
        raise ValidationFailed({"incident_id": "Unknown incident"})

    now = utcnow()
    task = VolunteerTask(
        **payload.model_dump(),
        current_volunteers=0,
        status=TaskStatus.OPEN,
        created_at=now,
        updated_at=now,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    log.info("task_created", task_id=task.id, required=task.required_volunteers)
    return task


def list_open_tasks(db: Session, now: datetime | None = None) -> list[VolunteerTask]:
    now = now or utcnow()
    return (
        db.query(VolunteerTask)
        .options(joinedload(VolunteerTask.incident))
        .filter(VolunteerTask.status == TaskStatus.OPEN, VolunteerTask.start_date > now)
        .order_by(VolunteerTask.start_date.asc())
        .all()
    )


def task_details(db: Session, task_id: str) -> VolunteerTask:
    task = (
        db.query(VolunteerTask)
        .options(joinedload(VolunteerTask.incident))
        .filter(VolunteerTask.id == task_id)
        .one_or_none()
    )
    if task is None:
        raise NotFound("Task not found")
    return task


def join_task(db: Session, task_id: str, principal: Principal) -> VolunteerAssignment:
    if db.get(VolunteerTask, task_id) is None:
        raise NotFound("Task not found")

    existing = (
        db.query(VolunteerAssignment.id)
        .filter(VolunteerAssignment.task_id == task_id, VolunteerAssignment.volunteer_id == principal.user_id)
        .first()
    )
    if existing:
        log.info("task_join_rejected", task_id=task_id, reason="already_assigned")
        raise AlreadyAssigned()

    now = utcnow()
    claimed = db.execute(
        update(VolunteerTask)
        .where(
            VolunteerTask.id == task_id,
            VolunteerTask.current_volunteers < VolunteerTask.required_volunteers,
        )
        .values(current_volunteers=VolunteerTask.current_volunteers + 1, updated_at=now)
        .execution_options(synchronize_session=False)
    ).rowcount
    if not claimed:
        db.rollback()
        log.info("task_join_rejected", task_id=task_id, reason="task_full")
        raise TaskFull()

    db.execute(
        update(VolunteerTask)
        .where(
            VolunteerTask.id == task_id,
            VolunteerTask.status == TaskStatus.OPEN,
            VolunteerTask.current_volunteers >= VolunteerTask.required_volunteers,
        )
        .values(status=TaskStatus.IN_PROGRESS)
        .execution_options(synchronize_session=False)
    )

    assignment = VolunteerAssignment(
        task_id=task_id,
        volunteer_id=principal.user_id,
        assigned_at=now,
        status=AssignmentStatus.ASSIGNED,
    )
    db.add(assignment)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent join by the same volunteer committed first; undoes our slot claim too
        db.rollback()
        log.info("task_join_rejected", task_id=task_id, reason="already_assigned")
        raise AlreadyAssigned()
    db.refresh(assignment)
    log.info("task_joined", task_id=task_id, assignment_id=assignment.id, user_id=principal.user_id)
    return assignment


def my_assignments(db: Session, principal: Principal) -> list[VolunteerAssignment]:
    return (
        db.query(VolunteerAssignment)
        .options(joinedload(VolunteerAssignment.task).joinedload(VolunteerTask.incident))
        .filter(VolunteerAssignment.volunteer_id == principal.user_id)
        .order_by(VolunteerAssignment.assigned_at.desc())
        .all()
    )


def find_assignment(db: Session, assignment_id: str) -> VolunteerAssignment:
    assignment = (
        db.query(VolunteerAssignment)
        .options(joinedload(VolunteerAssignment.task))
        .filter(VolunteerAssignment.id == assignment_id)
        .one_or_none()
    )
    if assignment is None:
        raise NotFound("Assignment not found")
    return assignment


def update_hours(db: Session, assignment_id: str, payload: HoursIn, principal: Principal) -> VolunteerAssignment:
    assignment = find_assignment(db, assignment_id)
    if assignment.volunteer_id != principal.user_id and not principal.is_admin:
        raise Forbidden("You can only record hours for your own assignments")

    assignment.hours_worked = payload.hours_worked
    assignment.notes = payload.notes
    assignment.status = AssignmentStatus.COMPLETED
    db.commit()
    db.refresh(assignment)
    log.info("hours_recorded", assignment_id=assignment.id, hours=str(assignment.hours_worked))
    return assignment
