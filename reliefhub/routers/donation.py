# reliefhub/routers/donation.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from reliefhub.database import get_db
from reliefhub.deps import flash, require_principal
from reliefhub.errors import ValidationFailed
from reliefhub.schemas import DonationIn, Principal, parse_form
from reliefhub.services import donations
from reliefhub.web import redirect, render

router = APIRouter(prefix="/donation", tags=["donation"])


def _form_page(request: Request, db: Session, form: dict, errors: dict, status_code: int = 200):
    return render(
        request, "donation/donate.html",
        {"form": form, "errors": errors, "categories": donations.list_categories(db)},
        status_code=status_code,
    )


@router.get("/donate", response_class=HTMLResponse)
def donate_page(
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal),
):
    return _form_page(request, db, {}, {})


@router.post("/donate")
async def donate(
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal),
):
    form = await request.form()
    try:
        payload = parse_form(DonationIn, form)
        donations.donate(db, payload, principal)
    except ValidationFailed as exc:
        return _form_page(request, db, dict(form), exc.errors, status_code=400)
    flash(request, "Thank you for your donation!")
    return redirect("/")


@router.get("/my-donations", response_class=HTMLResponse)
def my_donations(
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal),
):
    rows = donations.my_donations(db, principal)
    return render(request, "donation/my_donations.html", {"donations": rows})


@router.get("/all", response_class=HTMLResponse)
def all_donations(request: Request, db: Session = Depends(get_db)):
    return render(request, "donation/all.html", {"donations": donations.all_donations(db)})


@router.post("/receive/{donation_id}")
def receive(
    donation_id: str,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal),
):
    donations.mark_received(db, donation_id, principal)
    flash(request, "Donation marked as received.")
    return redirect("/donation/all")
