"""Pure listing rules: draft validation and the rolling monthly auction quota."""

from datetime import datetime, timedelta

from src.dx_common.datetime_utils import add_months
from src.dx_common.enums import ListingType
from src.dx_common.errors import QuotaExceededError, ValidationError
from src.dx_listing.domain.models import ListingDraft, SellerQuota

TITLE_MIN, TITLE_MAX = 3, 100
DESCRIPTION_MIN, DESCRIPTION_MAX = 10, 1000
IMAGES_MIN, IMAGES_MAX = 1, 5
ADMIN_REASON_MIN = 10


def validate_draft(draft: ListingDraft) -> None:
    """Raise ValidationError on the first failed field rule."""
    if not TITLE_MIN <= len(draft.title.strip()) <= TITLE_MAX:
        raise ValidationError(f"Title must be {TITLE_MIN}-{TITLE_MAX} characters")
    if not DESCRIPTION_MIN <= len(draft.description.strip()) <= DESCRIPTION_MAX:
        raise ValidationError(
            f"Description must be {DESCRIPTION_MIN}-{DESCRIPTION_MAX} characters"
        )
    if not IMAGES_MIN <= len(draft.images) <= IMAGES_MAX:
        raise ValidationError(f"A listing needs {IMAGES_MIN}-{IMAGES_MAX} images")
    if not draft.category.strip():
        raise ValidationError("Category is required")
    if not draft.condition.strip():
        raise ValidationError("Condition is required")

    if draft.listing_type == ListingType.REGULAR.value:
        if draft.price is None:
            raise ValidationError("Price is required for regular listings")
        if draft.price <= 0:
            raise ValidationError("Price must be positive")
    elif draft.listing_type == ListingType.AUCTION.value:
        if draft.start_price is None:
            raise ValidationError("Start price is required for auctions")
        if draft.start_price <= 0:
            raise ValidationError("Start price must be positive")
        if draft.reserve_price is not None and draft.reserve_price <= 0:
            raise ValidationError("Reserve price must be positive")
        if draft.auction_duration_hours is not None and draft.auction_duration_hours <= 0:
            raise ValidationError("Auction duration must be positive")
    else:
        raise ValidationError(f"Unknown listing type: {draft.listing_type}")


def auction_quota_needs_reset(quota: SellerQuota, now: datetime) -> bool:
    """The counter resets once the reset timestamp is over a calendar month old."""
    return quota.auction_limit_reset_at < add_months(now, -1)


def check_auction_quota(quota: SellerQuota, limit: int, now: datetime) -> bool:
    """Return True when the counter must be reset before use.

    Raises QuotaExceededError (with the next reset date) once the quota is used up.
    """
    if auction_quota_needs_reset(quota, now):
        if limit <= 0:
            raise QuotaExceededError(limit, add_months(now, 1))
        return True
    if quota.auctions_used_this_month >= limit:
        raise QuotaExceededError(limit, add_months(quota.auction_limit_reset_at, 1))
    return False


def auction_end_time(now: datetime, duration_hours: int) -> datetime:
    return now + timedelta(hours=duration_hours)


def validate_admin_reason(reason: str) -> None:
    if len(reason.strip()) < ADMIN_REASON_MIN:
        raise ValidationError(f"Reason must be at least {ADMIN_REASON_MIN} characters")
