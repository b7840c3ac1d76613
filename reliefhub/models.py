# reliefhub/models.py
import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import declarative_base, relationship, Mapped, mapped_column
from sqlalchemy import (
    String, Text, Boolean, DateTime, ForeignKey, Float, Integer, Numeric,
    UniqueConstraint, CheckConstraint, Enum as SAEnum,
)

from reliefhub.utils import uuid_str, utcnow

Base = declarative_base()


class Role(str, enum.Enum):
    VOLUNTEER = "Volunteer"
    DONOR = "Donor"
    ADMIN = "Admin"


class Severity(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class IncidentStatus(str, enum.Enum):
    REPORTED = "Reported"
    VERIFIED = "Verified"
    IN_PROGRESS = "InProgress"
    RESOLVED = "Resolved"


class DonationStatus(str, enum.Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    RECEIVED = "Received"


class TaskStatus(str, enum.Enum):
    OPEN = "Open"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


class AssignmentStatus(str, enum.Enum):
    ASSIGNED = "Assigned"
    COMPLETED = "Completed"


def enum_column(cls: type[enum.Enum]) -> SAEnum:
    # stored as the display value ('InProgress'), not the member name
    return SAEnum(
        cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class User(Base):
    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)

    role: Mapped[Role] = mapped_column(enum_column(Role), default=Role.VOLUNTEER, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class DisasterIncident(Base):
    __tablename__ = "disaster_incidents"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    reporter_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    incident_type: Mapped[str] = mapped_column(String(50), nullable=False)
    location: Mapped[str] = mapped_column(String(300), nullable=False)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    severity: Mapped[Severity] = mapped_column(enum_column(Severity), default=Severity.MEDIUM, nullable=False)
    status: Mapped[IncidentStatus] = mapped_column(
        enum_column(IncidentStatus), default=IncidentStatus.REPORTED, nullable=False
    )
    people_affected: Mapped[int | None] = mapped_column(Integer, nullable=True)
    immediate_needs: Mapped[str | None] = mapped_column(Text, nullable=True)

    reported_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    reporter = relationship("User")
    tasks = relationship("VolunteerTask", back_populates="incident")

    __table_args__ = (
        CheckConstraint("people_affected IS NULL OR people_affected >= 0", name="ck_incidents_people_affected"),
    )


class ResourceCategory(Base):
    __tablename__ = "resource_categories"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class Donation(Base):
    __tablename__ = "donations"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    donor_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    category_id: Mapped[str] = mapped_column(String(36), ForeignKey("resource_categories.id"), nullable=False)

    item_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    donation_type: Mapped[str] = mapped_column(String(50), nullable=False)

    status: Mapped[DonationStatus] = mapped_column(
        enum_column(DonationStatus), default=DonationStatus.PENDING, nullable=False
    )
    donated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)
    received_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    donor = relationship("User")
    category = relationship("ResourceCategory")

    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_donations_quantity"),)


class VolunteerTask(Base):
    __tablename__ = "volunteer_tasks"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    incident_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("disaster_incidents.id"), nullable=True, index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    task_type: Mapped[str] = mapped_column(String(50), nullable=False)
    location: Mapped[str] = mapped_column(String(300), nullable=False)

    required_volunteers: Mapped[int] = mapped_column(Integer, nullable=False)
    current_volunteers: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    status: Mapped[TaskStatus] = mapped_column(enum_column(TaskStatus), default=TaskStatus.OPEN, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    incident = relationship("DisasterIncident", back_populates="tasks")
    assignments = relationship("VolunteerAssignment", back_populates="task")

    __table_args__ = (
        CheckConstraint("required_volunteers >= 1", name="ck_tasks_required"),
        CheckConstraint(
            "current_volunteers >= 0 AND current_volunteers <= required_volunteers",
            name="ck_tasks_capacity",
        ),
    )

    @property
    def open_slots(self) -> int:
        return max(self.required_volunteers - self.current_volunteers, 0)


class VolunteerAssignment(Base):
    __tablename__ = "volunteer_assignments"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    task_id: Mapped[str] = mapped_column(String(36), ForeignKey("volunteer_tasks.id"), nullable=False)
    volunteer_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    assigned_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    status: Mapped[AssignmentStatus] = mapped_column(
        enum_column(AssignmentStatus), default=AssignmentStatus.ASSIGNED, nullable=False
    )
    hours_worked: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    task = relationship("VolunteerTask", back_populates="assignments")
    volunteer = relationship("User")

    __table_args__ = (
        UniqueConstraint("task_id", "volunteer_id", name="uq_assignments_task_volunteer"),
        CheckConstraint("hours_worked IS NULL OR (hours_worked >= 0 AND hours_worked <= 999.99)",
                        name="ck_assignments_hours"),
    )
