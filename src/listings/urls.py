from django.urls import path

from .views import (
    ApproveListingView,
    BulkApproveListingsView,
    CreateListingView,
    DeleteListingView,
    ListingDetailView,
    ListingListView,
    ListingStatsView,
    OwnerContactView,
    RecentListingsView,
    RejectListingView,
    UpdateListingView,
)

urlpatterns = [
    path("get", ListingListView.as_view(), name="listing-list"),
    path("get/<str:pk>", ListingDetailView.as_view(), name="listing-detail"),
    path("stats", ListingStatsView.as_view(), name="listing-stats"),
    path("recent", RecentListingsView.as_view(), name="listing-recent"),
    path("contact/<str:pk>", OwnerContactView.as_view(), name="listing-contact"),
    path("create", CreateListingView.as_view(), name="listing-create"),
    path("delete/<str:pk>", DeleteListingView.as_view(), name="listing-delete"),
    path("update/<str:pk>", UpdateListingView.as_view(), name="listing-update"),
    path("approve/<str:pk>", ApproveListingView.as_view(), name="listing-approve"),
    path("reject/<str:pk>", RejectListingView.as_view(), name="listing-reject"),
    path("bulk-approve", BulkApproveListingsView.as_view(), name="listing-bulk-approve"),
]
