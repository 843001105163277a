"""Matches slot changes against watches and delivers alerts."""
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import pytz
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.core.config import settings
from courtwatch.models.notification_channel import EMAIL, TELEGRAM, NotificationChannel
from courtwatch.models.notification_log import NotificationLogEntry
from courtwatch.models.notification_preference import NotificationPreference
from courtwatch.models.venue import Venue
from courtwatch.models.watch import Watch
from courtwatch.services.differ import SlotChange
from courtwatch.services.email_notifier import EmailNotifier, email_notifier, format_changes_for_email
from courtwatch.services.telegram_notifier import (
    TelegramNotifier,
    format_changes_for_telegram,
    telegram_notifier,
)

logger = logging.getLogger(__name__)


def is_weekend(date: str) -> bool:
    return datetime.strptime(date, "%Y-%m-%d").weekday() >= 5


def matches_watch(change: SlotChange, watch: Watch, venue_id: Optional[int]) -> bool:
    """
    Check whether a change falls inside a watch.

    Args:
        change: Slot that became available
        watch: Watch to test
        venue_id: Database id of the change's venue

    Returns:
        True if the venue and the weekday/weekend time list both match
    """
    if watch.venue_id is not None and watch.venue_id != venue_id:
        return False

    times = watch.weekend_times if is_weekend(change.date) else watch.weekday_times
    if not isinstance(times, list) or not times:
        return False

    wanted = change.time.lower().strip()
    return any(isinstance(t, str) and t.lower().strip() == wanted for t in times)


def is_quiet_hour(hour: int, start: Optional[int], end: Optional[int]) -> bool:
    """Quiet hours may wrap midnight. Equal bounds mean no quiet hours."""
    if start is None or end is None or start == end:
        return False
    if start < end:
        return start <= hour < end
    return hour >= start or hour < end


def local_now(now_utc: Optional[datetime] = None) -> datetime:
    now_utc = now_utc or datetime.utcnow()
    return now_utc.replace(tzinfo=pytz.UTC).astimezone(pytz.timezone(settings.TIMEZONE))


def can_notify(
    preference: Optional[NotificationPreference],
    now_utc: datetime,
    sent_today: int,
    last_sent_at: Optional[datetime],
) -> bool:
    """
    Apply a user's quiet hours, daily cap and cooldown.

    Args:
        preference: The user's preferences, or None for no limits
        now_utc: Current time, naive UTC
        sent_today: Messages already sent to the user since local midnight
        last_sent_at: When the user was last notified, naive UTC

    Returns:
        True if a message may go out now
    """
    if preference is None:
        return True

    if is_quiet_hour(
        local_now(now_utc).hour,
        preference.quiet_hours_start,
        preference.quiet_hours_end,
    ):
        return False

    if preference.max_notifications_per_day is not None and sent_today >= preference.max_notifications_per_day:
        return False

    cooldown = preference.notification_cooldown_minutes or 0
    if last_sent_at is not None and now_utc - last_sent_at < timedelta(minutes=cooldown):
        return False

    return True


async def _delivery_history(db: AsyncSession, user_id: int, now_utc: datetime):
    """Messages sent to a user since local midnight, and the latest send time."""
    midnight_local = local_now(now_utc).replace(hour=0, minute=0, second=0, microsecond=0)
    midnight_utc = midnight_local.astimezone(pytz.UTC).replace(tzinfo=None)

    # Every slot in one message shares its sent_at
    sent_today = (
        await db.execute(
            select(func.count(func.distinct(NotificationLogEntry.sent_at))).where(
                NotificationLogEntry.user_id == user_id,
                NotificationLogEntry.sent_at >= midnight_utc,
            )
        )
    ).scalar() or 0

    last_sent_at = (
        await db.execute(
            select(func.max(NotificationLogEntry.sent_at)).where(NotificationLogEntry.user_id == user_id)
        )
    ).scalar()
    return sent_today, last_sent_at


async def notify_users(
    db: AsyncSession,
    changes: List[SlotChange],
    telegram: Optional[TelegramNotifier] = None,
    email: Optional[EmailNotifier] = None,
    now_utc: Optional[datetime] = None,
) -> int:
    """
    Deliver newly available slots to every matching user channel.

    A slot is sent to a channel at most once. Log rows are written only after
    the provider accepted the message, so failed sends are retried on the
    next run.

    Returns:
        Number of messages sent
    """
    if not changes:
        return 0

    telegram = telegram or telegram_notifier
    email = email or email_notifier
    now_utc = now_utc or datetime.utcnow()

    venue_ids: Dict[str, int] = {
        slug: venue_id for venue_id, slug in (await db.execute(select(Venue.id, Venue.slug))).all()
    }

    watches = (await db.execute(select(Watch).where(Watch.active == True))).scalars().all()  # noqa: E712

    # Union of matching changes per user, in change order
    matches_by_user: Dict[int, Dict[str, SlotChange]] = {}
    for watch in watches:
        for change in changes:
            if matches_watch(change, watch, venue_ids.get(change.venue)):
                matches_by_user.setdefault(watch.user_id, {}).setdefault(change.key, change)

    sent = 0
    for user_id, matched in matches_by_user.items():
        preference = (
            await db.execute(
                select(NotificationPreference).where(NotificationPreference.user_id == user_id)
            )
        ).scalar_one_or_none()

        sent_today, last_sent_at = await _delivery_history(db, user_id, now_utc)
        if not can_notify(preference, now_utc, sent_today, last_sent_at):
            logger.info(f"Skipping user {user_id}: quiet hours, daily cap or cooldown")
            continue

        channels = (
            await db.execute(
                select(NotificationChannel).where(
                    NotificationChannel.user_id == user_id,
                    NotificationChannel.active == True,  # noqa: E712
                )
            )
        ).scalars().all()

        for channel in channels:
            if channel.type == EMAIL and preference is not None and not preference.email_enabled:
                continue

            logged = set(
                (
                    await db.execute(
                        select(NotificationLogEntry.slot_key).where(
                            NotificationLogEntry.channel_id == channel.id,
                            NotificationLogEntry.slot_key.in_(list(matched.keys())),
                        )
                    )
                ).scalars().all()
            )
            pending = [c for key, c in matched.items() if key not in logged]
            if not pending:
                continue

            try:
                if channel.type == TELEGRAM:
                    result = await telegram.send_message(channel.destination, format_changes_for_telegram(pending))
                elif channel.type == EMAIL:
                    subject, html = format_changes_for_email(pending)
                    result = await email.send_email(channel.destination, subject, html)
                else:
                    logger.error(f"Unsupported channel type {channel.type} on channel {channel.id}")
                    continue
            except Exception as e:
                logger.error(f"Failed to notify user {user_id} via {channel.type}: {e}", exc_info=True)
                continue

            if result is None:
                # Provider not configured, nothing was delivered
                continue

            for change in pending:
                db.add(
                    NotificationLogEntry(
                        user_id=user_id,
                        channel_id=channel.id,
                        slot_key=change.key,
                        sent_at=now_utc,
                    )
                )
            await db.commit()
            sent += 1
            logger.info(f"Notified user {user_id} via {channel.type}: {len(pending)} slots")

    return sent
