import django_filters as filters

from .models import Listing


class ListingFilter(filters.FilterSet):
    """Optional query-string filters, AND-combined with the visibility rule.

    Boolean flags only narrow the result when passed as the literal ``"true"``.
    """

    offer = filters.CharFilter(method="filter_true_flag")
    furnished = filters.CharFilter(method="filter_true_flag")
    parking = filters.CharFilter(method="filter_true_flag")
    type = filters.CharFilter(method="filter_type")
    searchTerm = filters.CharFilter(field_name="name", lookup_expr="icontains")

    class Meta:
        model = Listing
        fields = []

    def filter_true_flag(self, queryset, name, value):
        if str(value).strip().lower() == "true":
            return queryset.filter(**{name: True})
        return queryset

    def filter_type(self, queryset, name, value):
        value = (value or "").strip()
        if not value or value == "all":
            return queryset
        return queryset.filter(type=value)
