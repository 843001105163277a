"""Admin HTML pages and their access guard."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.api.deps import get_session_email, get_user_by_email
from courtwatch.core.database import get_db
from courtwatch.core.templates import render_template
from courtwatch.models.registration_request import PENDING, RegistrationRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin-pages"])

NAV_ITEMS = [
    ("/admin", "Overview"),
    ("/admin/users", "Users"),
    ("/admin/requests", "Requests"),
    ("/admin/system", "System"),
]


class PageRedirect(Exception):
    """Raised by page guards; rendered as a 303 redirect."""

    def __init__(self, location: str):
        self.location = location


async def require_admin_page(
    email: Optional[str] = Depends(get_session_email),
    db: AsyncSession = Depends(get_db),
) -> int:
    """
    Gate admin pages.

    Returns:
        Number of pending registration requests, counted on every load

    Raises:
        PageRedirect: To /login without a session, to /dashboard for non-admins
    """
    if not email:
        raise PageRedirect("/login")

    user = await get_user_by_email(db, email)
    if user is None or not user.is_admin:
        raise PageRedirect("/dashboard")

    result = await db.execute(
        select(func.count(RegistrationRequest.id)).where(RegistrationRequest.status == PENDING)
    )
    return result.scalar() or 0


def render_admin_page(template_name: str, title: str, active_path: str, pending_count: int) -> HTMLResponse:
    """Render an admin page inside the navigation shell."""
    html = render_template(
        template_name,
        title=title,
        active_path=active_path,
        pending_count=pending_count,
        nav_items=NAV_ITEMS,
    )
    return HTMLResponse(html)


@router.get("", response_class=HTMLResponse)
async def admin_overview(pending_count: int = Depends(require_admin_page)):
    return render_admin_page("admin/overview.html", "Overview", "/admin", pending_count)


@router.get("/users", response_class=HTMLResponse)
async def admin_users(pending_count: int = Depends(require_admin_page)):
    return render_admin_page("admin/users.html", "Users", "/admin/users", pending_count)


@router.get("/requests", response_class=HTMLResponse)
async def admin_requests(pending_count: int = Depends(require_admin_page)):
    return render_admin_page("admin/requests.html", "Requests", "/admin/requests", pending_count)


@router.get("/system", response_class=HTMLResponse)
async def admin_system(pending_count: int = Depends(require_admin_page)):
    return render_admin_page("admin/system.html", "System", "/admin/system", pending_count)
