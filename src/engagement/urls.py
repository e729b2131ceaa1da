from django.urls import path

from .views import (
    InquireListingView,
    LikeListingView,
    SaveListingView,
    TrackViewView,
    UserInteractionsView,
)

urlpatterns = [
    path("like/<str:pk>", LikeListingView.as_view(), name="listing-like"),
    path("save/<str:pk>", SaveListingView.as_view(), name="listing-save"),
    path("view/<str:pk>", TrackViewView.as_view(), name="listing-view"),
    path("inquire/<str:pk>", InquireListingView.as_view(), name="listing-inquire"),
    path("user-interactions", UserInteractionsView.as_view(), name="listing-user-interactions"),
]
