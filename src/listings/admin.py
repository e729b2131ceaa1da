from django.contrib import admin, messages

from . import moderation
from .models import Listing


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = (
        "id", "name", "type", "regular_price", "currency", "user_ref",
        "approved", "views", "likes", "saves", "inquiries", "created_at",
    )
    search_fields = ("name", "address", "description", "user_ref__email")
    list_filter = ("approved", "type", "offer", "furnished", "parking", "currency")
    ordering = ("-created_at",)
    readonly_fields = ("views", "likes", "saves", "inquiries", "approved_at", "approved_by", "created_at", "updated_at")
    actions = ("approve_selected",)

    @admin.action(description="Approve selected listings")
    def approve_selected(self, request, queryset):
        count = 0
        for listing_id in queryset.exclude(approved=True).values_list("id", flat=True):
            moderation.approve(listing_id, request.user)
            count += 1
        self.message_user(request, f"Approved {count} listings", messages.SUCCESS)
