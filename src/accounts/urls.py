from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .views import (
    AllUsersView,
    CheckAdminView,
    MeView,
    RegisterView,
    UpdateUserRoleView,
    UserCountView,
    UserListingsView,
)

urlpatterns = [
    path("register", RegisterView.as_view(), name="register"),
    path("token", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("token/refresh", TokenRefreshView.as_view(), name="token_refresh"),
    path("me", MeView.as_view(), name="me"),
    path("count", UserCountView.as_view(), name="user-count"),
    path("all", AllUsersView.as_view(), name="user-all"),
    path("role/<str:pk>", UpdateUserRoleView.as_view(), name="user-role"),
    path("check-admin/<str:pk>", CheckAdminView.as_view(), name="user-check-admin"),
    path("listings/<str:pk>", UserListingsView.as_view(), name="user-listings"),
]
