# reliefhub/routers/volunteer.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from reliefhub.database import get_db
from reliefhub.deps import flash, require_principal
from reliefhub.errors import AlreadyAssigned, Forbidden, NotFound, TaskFull, ValidationFailed
from reliefhub.schemas import HoursIn, Principal, TaskIn, parse_form
from reliefhub.services import incidents, volunteers
from reliefhub.web import redirect, render

router = APIRouter(prefix="/volunteer", tags=["volunteer"])


@router.get("/tasks", response_class=HTMLResponse)
def tasks(request: Request, db: Session = Depends(get_db)):
    return render(request, "volunteer/tasks.html", {"tasks": volunteers.list_open_tasks(db)})


@router.get("/task-details/{task_id}", response_class=HTMLResponse)
def task_details(task_id: str, request: Request, db: Session = Depends(get_db)):
    return render(request, "volunteer/task_details.html", {"task": volunteers.task_details(db, task_id)})


@router.post("/join-task/{task_id}")
def join_task(
    task_id: str,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal),
):
    try:
        volunteers.join_task(db, task_id, principal)
    except NotFound as exc:
        flash(request, exc.message, "error")
        return redirect("/volunteer/tasks")
    except (AlreadyAssigned, TaskFull) as exc:
        flash(request, exc.message, "error")
        return redirect(f"/volunteer/task-details/{task_id}")
    flash(request, "Successfully joined the task!")
    return redirect("/volunteer/my-assignments")


@router.get("/my-assignments", response_class=HTMLResponse)
def my_assignments(
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal),
):
    rows = volunteers.my_assignments(db, principal)
    return render(request, "volunteer/my_assignments.html", {"assignments": rows})


@router.post("/update-hours/{assignment_id}")
async def update_hours(
    assignment_id: str,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal),
):
    volunteers.find_assignment(db, assignment_id)
    form = await request.form()
    try:
        payload = parse_form(HoursIn, form)
    except ValidationFailed:
        flash(request, "Hours must be between 0 and 999.99.", "error")
        return redirect("/volunteer/my-assignments")
    volunteers.update_hours(db, assignment_id, payload, principal)
    flash(request, "Hours updated successfully!")
    return redirect("/volunteer/my-assignments")


# --- admin ---
@router.get("/create-task", response_class=HTMLResponse)
def create_task_page(
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal),
):
    if not principal.is_admin:
        raise Forbidden("Only administrators can create volunteer tasks")
    return render(
        request, "volunteer/create_task.html",
        {"form": {}, "errors": {}, "incidents": incidents.list_incidents(db)},
    )


@router.post("/create-task")
async def create_task(
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal),
):
    form = await request.form()
    try:
        payload = parse_form(TaskIn, form)
        task = volunteers.create_task(db, payload, principal)
    except ValidationFailed as exc:
        return render(
            request, "volunteer/create_task.html",
            {"form": dict(form), "errors": exc.errors, "incidents": incidents.list_incidents(db)},
            status_code=400,
        )
    flash(request, "Task created.")
    return redirect(f"/volunteer/task-details/{task.id}")
