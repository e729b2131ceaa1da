from decimal import Decimal

from django.conf import settings
from django.db.models import Sum

from src.accounts.permissions import is_admin_user
from src.shared.enums import ListingType

from .filters import ListingFilter
from .models import Listing

SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "regularPrice": "regular_price",
    "discountPrice": "discount_price",
    "name": "name",
    "views": "views",
    "likes": "likes",
    "saves": "saves",
    "inquiries": "inquiries",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
}
DEFAULT_SORT = "createdAt"


def visibility_filter(user, params) -> dict:
    """Role-based base filter; the first matching rule wins."""
    if is_admin_user(user):
        # Any ?approved= value other than "true", including an empty one, selects pending listings.
        if "approved" in params:
            return {"approved": (params.get("approved") or "").strip().lower() == "true"}
        return {}

    user_ref = (params.get("userRef") or "").strip()
    if user_ref and getattr(user, "is_authenticated", False) and user_ref == str(user.pk):
        return {"user_ref_id": user.pk}

    return {"approved": True}


def ordering(params) -> list:
    field = SORT_FIELDS.get((params.get("sort") or "").strip(), SORT_FIELDS[DEFAULT_SORT])
    prefix = "" if (params.get("order") or "").strip().lower() == "asc" else "-"
    return [f"{prefix}{field}", f"{prefix}id"]


def plan_listings(user, params):
    """Filtered and sorted queryset; pagination is applied by the caller."""
    qs = Listing.objects.filter(**visibility_filter(user, params))
    qs = ListingFilter(params, queryset=qs).qs
    return qs.order_by(*ordering(params))


def recent_listings(user, limit=None):
    limit = limit or settings.RECENT_LISTINGS_LIMIT
    qs = Listing.objects.all() if is_admin_user(user) else Listing.objects.approved()
    return qs.order_by("-created_at", "-id")[:limit]


def listing_stats() -> dict:
    approved = Listing.objects.approved()
    revenue = approved.aggregate(total=Sum("regular_price"))["total"] or Decimal("0")
    return {
        "total": Listing.objects.count(),
        "active": approved.count(),
        "pendingApproval": Listing.objects.pending().count(),
        "forRent": approved.filter(type=ListingType.RENT).count(),
        "forSale": approved.filter(type=ListingType.SALE).count(),
        "revenue": revenue,
    }
