import logging

from django.contrib.auth import get_user_model
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from src.accounts.authentication import OPTIONAL_AUTHENTICATION
from src.accounts.permissions import IsAdmin, IsOwnerOrAdmin, is_admin_user
from src.engagement.tracking import Visitor, record_view, should_track
from src.shared.exceptions import ListingNotFound, OwnerNotFound
from src.shared.pagination import ListingPagination
from src.shared.utils import parse_pk

from . import moderation
from .models import Listing
from .queries import listing_stats, plan_listings, recent_listings
from .serializers import (
    ListingDetailSerializer,
    ListingSerializer,
    ListingUpdateSerializer,
    OwnerContactSerializer,
    RejectListingSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


def get_listing_or_404(raw_pk) -> Listing:
    listing = Listing.objects.filter(pk=parse_pk(raw_pk)).first()
    if listing is None:
        raise ListingNotFound()
    return listing


class ListingListView(generics.ListAPIView):
    authentication_classes = OPTIONAL_AUTHENTICATION
    permission_classes = [AllowAny]
    serializer_class = ListingSerializer
    pagination_class = ListingPagination
    filter_backends = ()

    def get_queryset(self):
        return plan_listings(self.request.user, self.request.query_params)


class ListingDetailView(APIView):
    authentication_classes = OPTIONAL_AUTHENTICATION
    permission_classes = [AllowAny]

    def get(self, request, pk):
        listing = get_listing_or_404(pk)
        if should_track(request):
            result = record_view(listing.pk, Visitor.from_request(request))
            listing.views = result.views
        serializer = ListingDetailSerializer(listing, context={"request": request})
        return Response(serializer.data)


class CreateListingView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ListingSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        listing = serializer.save(
            user_ref=request.user,
            **moderation.initial_moderation_state(request.user),
        )
        logger.info(
            "Listing created: %s (id=%s, type=%s, approved=%s) by user %s",
            listing.name, listing.pk, listing.type, listing.approved, request.user.pk,
        )
        return Response(
            {
                "success": True,
                "message": "Listing created successfully",
                "listing": ListingSerializer(listing, context={"request": request}).data,
            },
            status=status.HTTP_201_CREATED,
        )


class UpdateListingView(APIView):
    permission_classes = [IsAuthenticated, IsOwnerOrAdmin]

    def post(self, request, pk):
        listing = get_listing_or_404(pk)
        self.check_object_permissions(request, listing)
        serializer = ListingUpdateSerializer(
            listing, data=request.data, partial=True, context={"request": request}
        )
        serializer.is_valid(raise_exception=True)

        extra = {}
        approved = serializer.validated_data.pop("approved", None)
        if approved is not None and is_admin_user(request.user):
            if approved and not listing.approved:
                extra = moderation.approval_fields(request.user)
            elif not approved:
                extra = {"approved": False, "approved_at": None, "approved_by": None}
        listing = serializer.save(**extra)

        actor = "admin" if is_admin_user(request.user) else "user"
        logger.info("Listing updated: %s by %s %s", listing.pk, actor, request.user.pk)
        return Response(ListingSerializer(listing, context={"request": request}).data)


class DeleteListingView(APIView):
    permission_classes = [IsAuthenticated, IsOwnerOrAdmin]

    def delete(self, request, pk):
        listing = get_listing_or_404(pk)
        self.check_object_permissions(request, listing)
        listing_id = listing.pk
        listing.delete()
        actor = "admin" if is_admin_user(request.user) else "user"
        logger.info("Listing deleted: %s by %s %s", listing_id, actor, request.user.pk)
        return Response({"success": True, "message": "Listing has been deleted"})


class ApproveListingView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request, pk):
        listing = moderation.approve(parse_pk(pk), request.user)
        return Response(ListingSerializer(listing, context={"request": request}).data)


class RejectListingView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request, pk):
        listing_id = parse_pk(pk)
        s = RejectListingSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        listing = moderation.reject(listing_id, request.user, s.validated_data.get("reason"))
        return Response(ListingSerializer(listing, context={"request": request}).data)


class BulkApproveListingsView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        modified = moderation.bulk_approve(request.user)
        return Response(
            {
                "message": f"Successfully approved {modified} listings",
                "modifiedCount": modified,
            }
        )


class ListingStatsView(APIView):
    authentication_classes = OPTIONAL_AUTHENTICATION
    permission_classes = [AllowAny]

    def get(self, request):
        return Response(listing_stats())


class RecentListingsView(APIView):
    authentication_classes = OPTIONAL_AUTHENTICATION
    permission_classes = [AllowAny]

    def get(self, request):
        rows = recent_listings(request.user)
        return Response(ListingSerializer(rows, many=True, context={"request": request}).data)


class OwnerContactView(APIView):
    authentication_classes = OPTIONAL_AUTHENTICATION
    permission_classes = [AllowAny]

    def get(self, request, pk):
        listing = get_listing_or_404(pk)
        owner = User.objects.filter(pk=listing.user_ref_id).first()
        if owner is None:
            raise OwnerNotFound()
        return Response(OwnerContactSerializer(owner).data)
