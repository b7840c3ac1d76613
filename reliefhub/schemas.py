from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from typing import Any, Optional, Mapping
from datetime import datetime, timezone
from decimal import Decimal

from reliefhub.errors import ValidationFailed
from reliefhub.models import Role, Severity, IncidentStatus

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class FormIn(BaseModel):
    """Base for HTML form payloads: blank inputs are dropped so field defaults apply."""

    model_config = ConfigDict(str_strip_whitespace=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_blanks(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {k: v for k, v in data.items() if not (isinstance(v, str) and not v.strip())}
        return data


def parse_form(model: type[FormIn], data: Mapping[str, Any]) -> FormIn:
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        errors: dict[str, str] = {}
        for err in exc.errors():
            field = ".".join(str(p) for p in err["loc"]) or "__all__"
            errors.setdefault(field, err["msg"])
        raise ValidationFailed(errors) from exc


# --- Session ---
class Principal(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    display_name: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


# --- Account ---
class RegisterIn(FormIn):
    email: str = Field(max_length=320, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6, max_length=128)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = Field(default=None, max_length=300)
    role: Role = Role.VOLUNTEER


class LoginIn(FormIn):
    email: str
    password: str = Field(min_length=1)


# --- Incidents ---
class IncidentIn(FormIn):
    title: str = Field(max_length=255)
    description: str
    incident_type: str = Field(max_length=50)
    location: str = Field(max_length=300)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    severity: Severity = Severity.MEDIUM
    people_affected: Optional[int] = Field(default=None, ge=0)
    immediate_needs: Optional[str] = None


class IncidentStatusIn(FormIn):
    status: IncidentStatus


# --- Donations ---
class DonationIn(FormIn):
    category_id: str
    item_name: str = Field(max_length=255)
    quantity: int = Field(ge=1)
    description: Optional[str] = None
    donation_type: str = Field(max_length=50)


# --- Volunteering ---
class TaskIn(FormIn):
    incident_id: Optional[str] = None
    title: str = Field(max_length=255)
    description: str
    task_type: str = Field(max_length=50)
    location: str = Field(max_length=300)
    required_volunteers: int = Field(ge=1)
    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def _as_naive_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @model_validator(mode="after")
    def _dates_in_order(self) -> "TaskIn":
        if self.end_date < self.start_date:
            raise ValueError("End date must not precede start date")
        return self


class HoursIn(FormIn):
    hours_worked: Decimal = Field(ge=0, le=Decimal("999.99"), max_digits=5, decimal_places=2)
    notes: Optional[str] = None


# --- Home ---
class DashboardOut(BaseModel):
    total_incidents: int
    active_volunteers: int
    total_donations: int
    open_tasks: int
    recent_incidents: list[Any] = []
