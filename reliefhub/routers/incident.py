# reliefhub/routers/incident.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from reliefhub.database import get_db
from reliefhub.deps import flash, require_principal
from reliefhub.errors import ValidationFailed
from reliefhub.models import IncidentStatus, Severity
from reliefhub.schemas import IncidentIn, IncidentStatusIn, Principal, parse_form
from reliefhub.services import incidents
from reliefhub.web import redirect, render

router = APIRouter(prefix="/incident", tags=["incident"])


def _form_page(request: Request, form: dict, errors: dict, status_code: int = 200):
    return render(
        request, "incident/report.html",
        {"form": form, "errors": errors, "severities": list(Severity)},
        status_code=status_code,
    )


@router.get("/report", response_class=HTMLResponse)
def report_page(request: Request, principal: Principal = Depends(require_principal)):
    return _form_page(request, {}, {})


@router.post("/report")
async def report(
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal),
):
    form = await request.form()
    try:
        payload = parse_form(IncidentIn, form)
    except ValidationFailed as exc:
        return _form_page(request, dict(form), exc.errors, status_code=400)
    incidents.report(db, payload, principal)
    flash(request, "Incident reported successfully!")
    return redirect("/")


@router.get("/list", response_class=HTMLResponse)
def list_incidents(request: Request, db: Session = Depends(get_db)):
    return render(request, "incident/list.html", {"incidents": incidents.list_incidents(db)})


@router.get("/details/{incident_id}", response_class=HTMLResponse)
def details(incident_id: str, request: Request, db: Session = Depends(get_db)):
    incident = incidents.details(db, incident_id)
    return render(
        request, "incident/details.html",
        {"incident": incident, "statuses": list(IncidentStatus)},
    )


@router.post("/status/{incident_id}")
async def change_status(
    incident_id: str,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal),
):
    form = await request.form()
    try:
        payload = parse_form(IncidentStatusIn, form)
    except ValidationFailed:
        flash(request, "Unknown incident status.", "error")
        return redirect(f"/incident/details/{incident_id}")
    incidents.update_status(db, incident_id, payload.status, principal)
    flash(request, "Incident status updated.")
    return redirect(f"/incident/details/{incident_id}")
