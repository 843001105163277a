"""
Jinja2 rendering for admin pages, emails and Telegram messages.

One autoescaping environment serves every template under courtwatch/templates.
"""
import logging
from collections import OrderedDict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader

from courtwatch.core.config import settings
from courtwatch.core.venues import get_booking_url

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


def short_date(date: str) -> str:
    """'2025-01-18' -> 'Sat 18 Jan'."""
    d = datetime.strptime(date, "%Y-%m-%d")
    return f"{d:%a} {d.day} {d:%b}"


def long_date(date: str) -> str:
    """'2025-01-18' -> 'Saturday 18 January'."""
    d = datetime.strptime(date, "%Y-%m-%d")
    return f"{d:%A} {d.day} {d:%B}"


def group_changes(changes: List[Any]) -> List[Dict[str, Any]]:
    """Group slot changes by venue and date, keeping first-seen order."""
    grouped: "OrderedDict[tuple, list]" = OrderedDict()
    for change in changes:
        grouped.setdefault((change.venue, change.venue_name, change.date), []).append(change)
    return [
        {"venue": venue, "venue_name": venue_name, "date": date, "slots": slots}
        for (venue, venue_name, date), slots in grouped.items()
    ]


env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)
env.filters["short_date"] = short_date
env.filters["long_date"] = long_date
env.filters["booking_url"] = get_booking_url


def get_common_context() -> Dict[str, Any]:
    return {"base_url": settings.BASE_URL, "brand_name": "Time for Tennis"}


def render_template(template_name: str, **context: Any) -> str:
    """
    Render a template with the common context merged in.

    Args:
        template_name: Path relative to the templates directory
        **context: Template variables, overriding the common ones

    Returns:
        Rendered text
    """
    full_context = get_common_context()
    full_context.update(context)
    return env.get_template(template_name).render(**full_context)
