# reliefhub/routers/home.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from reliefhub.database import get_db
from reliefhub.services import dashboard
from reliefhub.web import render

router = APIRouter(prefix="", tags=["home"])


@router.get("/", response_class=HTMLResponse)
def index(request: Request, db: Session = Depends(get_db)):
    return render(request, "home/index.html", {"stats": dashboard.summary(db)})


@router.get("/about", response_class=HTMLResponse)
def about(request: Request):
    return render(request, "home/about.html")


@router.get("/contact", response_class=HTMLResponse)
def contact(request: Request):
    return render(request, "home/contact.html")


@router.get("/privacy", response_class=HTMLResponse)
def privacy(request: Request):
    return render(request, "home/privacy.html")


@router.get("/healthz")
def healthz():
    return {"ok": True, "service": "reliefhub"}
