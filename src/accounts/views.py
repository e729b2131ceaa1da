import logging

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from src.listings.models import Listing
from src.listings.serializers import ListingSerializer
from src.shared.exceptions import UserNotFound
from src.shared.utils import parse_pk

from .permissions import IsAdmin, IsSelfOrAdmin
from .serializers import RegisterSerializer, RoleUpdateSerializer, UserSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


def get_user_or_404(raw_pk):
    user = User.objects.filter(pk=parse_pk(raw_pk, label="user")).first()
    if user is None:
        raise UserNotFound()
    return user


class RegisterView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User registered: %s (id=%s)", user.email, user.pk)
        return Response(
            {"success": True, "message": "User created successfully", "user": UserSerializer(user).data},
            status=status.HTTP_201_CREATED,
        )


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)


class UserCountView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        return Response({"count": User.objects.count()})


class AllUsersView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        users = User.objects.order_by("-date_joined", "-id")
        return Response(UserSerializer(users, many=True).data)


class UpdateUserRoleView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request, pk):
        user = get_user_or_404(pk)
        s = RoleUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        user.is_admin = s.validated_data["isAdmin"]
        user.save(update_fields=["is_admin"])
        logger.info("User %s role updated to admin=%s by admin %s", user.pk, user.is_admin, request.user.pk)
        return Response(UserSerializer(user).data)


class CheckAdminView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        user = get_user_or_404(pk)
        return Response({"isAdmin": user.has_admin_rights})


class UserListingsView(APIView):
    permission_classes = [IsAuthenticated, IsSelfOrAdmin]

    def get(self, request, pk):
        owner = get_user_or_404(pk)
        self.check_object_permissions(request, owner)
        listings = Listing.objects.filter(user_ref=owner).order_by("-created_at", "-id")
        return Response(ListingSerializer(listings, many=True, context={"request": request}).data)
