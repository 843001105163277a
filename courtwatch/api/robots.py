"""robots.txt for search engines and crawlers."""
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from courtwatch.core.config import settings

router = APIRouter(tags=["robots"])

DISALLOWED_PATHS = ["/api/", "/admin/", "/dashboard/", "/login/"]

BLOCKED_CRAWLERS = [
    "AhrefsBot",
    "SemrushBot",
    "DotBot",
    "MJ12bot",
    "BLEXBot",
    "DataForSeoBot",
]


def render_robots(base_url: str) -> str:
    lines = ["User-agent: *", "Allow: /"]
    lines += [f"Disallow: {path}" for path in DISALLOWED_PATHS]
    lines.append("")
    lines += [f"User-agent: {bot}" for bot in BLOCKED_CRAWLERS]
    lines.append("Disallow: /")
    lines.append("")
    lines.append(f"Sitemap: {base_url.rstrip('/')}/sitemap.xml")
    return "\n".join(lines) + "\n"


@router.get("/robots.txt", response_class=PlainTextResponse)
async def robots():
    return render_robots(settings.BASE_URL)
