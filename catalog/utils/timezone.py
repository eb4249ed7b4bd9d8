"""
Timezone utilities for the store's local time
"""

from datetime import datetime, timezone
import pytz

from ..config.settings import settings

STORE_TZ = pytz.timezone(settings.TIMEZONE)


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the way MongoDB hands it back.

    BSON dates carry millisecond precision, so microseconds are truncated to
    keep freshly built records equal to what a read returns.
    """
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_store_time(utc_dt: datetime) -> datetime:
    """Convert UTC datetime to the store timezone"""
    if utc_dt.tzinfo is None:
        # Assume UTC if no timezone info
        utc_dt = utc_dt.replace(tzinfo=timezone.utc)
    return utc_dt.astimezone(STORE_TZ)

