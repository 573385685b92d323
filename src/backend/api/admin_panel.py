"""
Server-rendered admin panel.

Admins sign in with email and password; the signed session cookie set by
Starlette's ``SessionMiddleware`` keeps them signed in. Pages redirect to the
login page when there is no admin session, the small JSON API under
``/admin/api`` answers 401 instead.
"""

from pathlib import Path
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import SettingsServiceDep, VotingServiceDep
from core.config import settings
from core.security import verify_password
from db.session import get_db
from repositories.project_repository import ProjectRepository
from repositories.user_repository import UserRepository
from schemas.auth import LoginRequest
from schemas.converters import voting_model_to_schema, voting_model_to_summary

logger = structlog.get_logger(__name__)

router = APIRouter()

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

SESSION_KEY = "admin_user"
LOGIN_URL = "/admin/login"
DASHBOARD_URL = "/admin/dashboard"


def _session_admin(request: Request) -> dict[str, Any] | None:
    return request.session.get(SESSION_KEY)


def require_admin_session(request: Request) -> dict[str, Any]:
    """Dependency for ``/admin/api`` routes: 401 without an admin session."""
    admin = _session_admin(request)
    if admin is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return admin


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


def _render(request: Request, name: str, admin: dict[str, Any], **context: Any) -> Response:
    return templates.TemplateResponse(
        request,
        f"admin/{name}",
        {"admin": admin, "app_name": settings.APP_NAME, **context},
    )


# ========== Public ==========


@router.get("/", include_in_schema=False)
async def admin_root(request: Request) -> RedirectResponse:
    if _session_admin(request):
        return _redirect(DASHBOARD_URL)
    return _redirect(LOGIN_URL)


@router.get("/login", include_in_schema=False)
async def login_page(request: Request) -> Response:
    if _session_admin(request):
        return _redirect(DASHBOARD_URL)
    return templates.TemplateResponse(request, "admin/login.html", {"app_name": settings.APP_NAME})


@router.post("/api/login")
async def admin_login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Start an admin session. Only users with the admin role may sign in."""
    users = UserRepository(db)
    user = await users.get_by_email(credentials.email)

    if user is None or not user.is_admin or not verify_password(credentials.password, user.password_hash):
        logger.warning("admin_login_failed", email_domain=credentials.email.split("@")[-1])
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"success": False, "detail": "Invalid credentials"},
        )

    request.session[SESSION_KEY] = {
        "id": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": user.role,
    }
    await users.update_last_login(user.id)
    await db.commit()

    logger.info("admin_logged_in", admin_id=str(user.id))
    return JSONResponse(content={"success": True, "redirect": DASHBOARD_URL})


# ========== Session required ==========


@router.post("/api/logout")
async def admin_logout_api(
    request: Request,
    admin: Annotated[dict[str, Any], Depends(require_admin_session)],
) -> RedirectResponse:
    request.session.clear()
    logger.info("admin_logged_out", admin_id=admin["id"])
    return RedirectResponse(url=LOGIN_URL, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/logout", include_in_schema=False)
async def admin_logout(request: Request) -> RedirectResponse:
    admin = _session_admin(request)
    if admin is not None:
        request.session.clear()
        logger.info("admin_logged_out", admin_id=admin["id"])
    return _redirect(LOGIN_URL)


@router.get("/api/user")
async def current_admin(
    admin: Annotated[dict[str, Any], Depends(require_admin_session)],
) -> dict[str, Any]:
    return {"user": admin}


@router.get("/dashboard", include_in_schema=False)
async def dashboard_page(
    request: Request,
    voting_service: VotingServiceDep,
    db: AsyncSession = Depends(get_db),
) -> Response:
    admin = _session_admin(request)
    if admin is None:
        return _redirect(LOGIN_URL)

    active = await voting_service.get_active_voting()
    return _render(
        request,
        "dashboard.html",
        admin,
        status_counts=await voting_service.get_status_counts(),
        user_count=await UserRepository(db).count_users(),
        active_voting=voting_model_to_schema(active) if active else None,
    )


@router.get("/settings", include_in_schema=False)
async def settings_page(request: Request, settings_service: SettingsServiceDep) -> Response:
    admin = _session_admin(request)
    if admin is None:
        return _redirect(LOGIN_URL)

    return _render(
        request,
        "settings.html",
        admin,
        features=await settings_service.get_feature_flags(),
        texts=await settings_service.get_texts(),
        themes=await settings_service.list_themes(),
        navigation=await settings_service.get_navigation(),
        config=await settings_service.get_config(include_private=True),
        language=settings.DEFAULT_LANGUAGE,
    )


@router.get("/votings", include_in_schema=False)
async def votings_page(request: Request, voting_service: VotingServiceDep) -> Response:
    admin = _session_admin(request)
    if admin is None:
        return _redirect(LOGIN_URL)

    rows = await voting_service.list_votings()
    return _render(
        request,
        "votings.html",
        admin,
        votings=[voting_model_to_summary(voting, participants, total) for voting, participants, total in rows],
    )


@router.get("/projects", include_in_schema=False)
async def projects_page(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    admin = _session_admin(request)
    if admin is None:
        return _redirect(LOGIN_URL)

    return _render(request, "projects.html", admin, projects=await ProjectRepository(db).list_projects())


@router.get("/users", include_in_schema=False)
async def users_page(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    admin = _session_admin(request)
    if admin is None:
        return _redirect(LOGIN_URL)

    users = UserRepository(db)
    return _render(
        request,
        "users.html",
        admin,
        users=await users.list_users(),
        user_count=await users.count_users(),
    )
