from django.conf import settings
from rest_framework.pagination import LimitOffsetPagination


class ListingPagination(LimitOffsetPagination):
    """`limit` / `startIndex` paging used by the web and mobile clients."""

    limit_query_param = "limit"
    offset_query_param = "startIndex"

    def __init__(self):
        self.default_limit = settings.LISTINGS_PAGE_SIZE
        self.max_limit = settings.LISTINGS_MAX_PAGE_SIZE

    def get_limit(self, request):
        # Non-numeric or zero limits fall back to the default page size.
        raw = request.query_params.get(self.limit_query_param)
        try:
            value = int(raw)
        except (TypeError, ValueError):
            return self.default_limit
        if value <= 0:
            return self.default_limit
        return min(value, self.max_limit)

    def get_offset(self, request):
        try:
            return max(int(request.query_params.get(self.offset_query_param)), 0)
        except (TypeError, ValueError):
            return 0
