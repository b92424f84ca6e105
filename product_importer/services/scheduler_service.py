import asyncio
import logging
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from product_importer.core.config import settings
from product_importer.database.connection import SessionLocal
from product_importer.services.backup_service import BackupResult, run_backup

logger = logging.getLogger(__name__)


def get_db_session() -> Session:
    return SessionLocal()


def parse_trigger_times(values: Sequence[str]) -> List[time]:
    """'09:41' -> time(9, 41). Sorted, duplicates dropped."""
    times = set()
    for value in values:
        hour, minute = value.strip().split(":")
        times.add(time(int(hour), int(minute)))
    return sorted(times)


def next_backup_run(now: datetime, trigger_times: Sequence[time], tz: tzinfo) -> datetime:
    """
    Earliest trigger strictly after now, as an aware datetime in tz.

    Missed triggers are never replayed: only the future is considered.
    """
    if not trigger_times:
        raise ValueError("At least one backup trigger time is required")

    now_utc = now.astimezone(timezone.utc)
    local_now = now.astimezone(tz)
    for day_offset in (0, 1):
        day = local_now.date() + timedelta(days=day_offset)
        for trigger in trigger_times:
            candidate = datetime.combine(day, trigger, tzinfo=tz)
            if candidate.astimezone(timezone.utc) > now_utc:
                return candidate
    # unreachable with at least one trigger time
    raise ValueError("No upcoming backup trigger")


def seconds_until(next_run: datetime, now: datetime) -> float:
    # same-tzinfo subtraction is wall-clock time; DST nights need real elapsed time
    return (next_run.astimezone(timezone.utc) - now.astimezone(timezone.utc)).total_seconds()


# ---------- BACKUP SCHEDULER ----------

async def backup_scheduler_loop(
    schedule: Optional[Sequence[str]] = None,
    timezone_name: Optional[str] = None,
):
    """
    Sleeps until the next configured trigger (09:41 and 23:43 by default),
    runs the backup, repeats.
    """
    trigger_times = parse_trigger_times(schedule or settings.BACKUP_SCHEDULE)
    tz = ZoneInfo(timezone_name or settings.BACKUP_TIMEZONE)
    logger.info(
        "Backup scheduler started: %s (%s)",
        ", ".join(t.strftime("%H:%M") for t in trigger_times), tz.key,
    )

    while True:
        now = datetime.now(tz)
        next_run = next_backup_run(now, trigger_times, tz)
        delay = seconds_until(next_run, now)
        logger.debug("Next backup run at %s (in %.0fs)", next_run.isoformat(), delay)
        await asyncio.sleep(delay)

        try:
            await run_scheduled_backup()
        except Exception:
            logger.exception("Scheduled backup run failed")


def _backup_in_own_session() -> BackupResult:
    db = get_db_session()
    try:
        return run_backup(db)
    finally:
        db.close()


async def run_scheduled_backup() -> BackupResult:
    # keep the event loop serving requests while the backup writes
    return await asyncio.to_thread(_backup_in_own_session)
