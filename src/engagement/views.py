from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from src.accounts.authentication import OPTIONAL_AUTHENTICATION
from src.listings.models import Listing
from src.listings.serializers import ListingSummarySerializer
from src.shared.exceptions import ListingNotFound
from src.shared.utils import parse_pk

from .inquiries import record_inquiry
from .reactions import interactions_for, toggle_like, toggle_save
from .serializers import InquiryCreateSerializer
from .tracking import Visitor, record_view, should_track


class LikeListingView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        result = toggle_like(parse_pk(pk), request.user)
        return Response({"liked": result.active, "likes": result.count})


class SaveListingView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        result = toggle_save(parse_pk(pk), request.user)
        return Response({"saved": result.active, "saves": result.count})


class TrackViewView(APIView):
    authentication_classes = OPTIONAL_AUTHENTICATION
    permission_classes = [AllowAny]

    def post(self, request, pk):
        listing_id = parse_pk(pk)
        if not should_track(request):
            views = Listing.objects.filter(pk=listing_id).values_list("views", flat=True).first()
            if views is None:
                raise ListingNotFound()
            return Response({"views": views, "tracked": False, "message": "View not tracked for admin preview"})
        result = record_view(listing_id, Visitor.from_request(request))
        return Response(
            {
                "views": result.views,
                "tracked": result.tracked,
                "message": "View tracked successfully" if result.tracked else "View already counted recently",
            }
        )


class InquireListingView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        listing_id = parse_pk(pk)
        s = InquiryCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        _, total = record_inquiry(
            listing_id,
            request.user,
            s.validated_data.get("type"),
            s.validated_data.get("message"),
        )
        return Response({"success": True, "message": "Inquiry sent successfully", "inquiries": total})


class UserInteractionsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        liked, saved = interactions_for(request.user)
        return Response(
            {
                "likedListings": ListingSummarySerializer(liked, many=True).data,
                "savedListings": ListingSummarySerializer(saved, many=True).data,
            }
        )
