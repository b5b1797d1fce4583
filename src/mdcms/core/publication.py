"""Post visibility rules derived from publication status and dates"""

from datetime import datetime, timezone
from typing import Optional

from mdcms.app_logger import get_logger
from mdcms.core.models import Post, PostStatus
from mdcms.core.utils.dates import parse_timestamp


logger = get_logger("publication")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def release_date(post: Post) -> Optional[str]:
    """Date a scheduled post goes live: scheduledDate, else date."""
    if post.scheduled_date:
        return post.scheduled_date
    logger.warning("Scheduled post %r has no scheduledDate; using date", post.slug)
    return post.date


def is_visible(
    post: Post,
    now: datetime,
    include_drafts: bool = False,
    include_scheduled: bool = False,
    ) -> bool:
    """Drafts need include_drafts; scheduled posts need include_scheduled or a release date <= now."""
    status = post.effective_status
    if status is PostStatus.draft:
        return include_drafts
    if status is PostStatus.scheduled:
        if include_scheduled:
            return True
        released = parse_timestamp(release_date(post))
        if released is None:
            logger.warning("Scheduled post %r has an unparseable release date", post.slug)
            return True
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return released <= now
    return True


def sort_key(post: Post) -> datetime:
    """Effective date for listing order; unparseable dates sort as oldest."""
    value = post.scheduled_date if post.effective_status is PostStatus.scheduled and post.scheduled_date else post.date
    return parse_timestamp(value) or _OLDEST
