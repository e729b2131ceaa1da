from django.contrib import admin

from .models import AnonymousView, Inquiry, ListingLike, ListingSave, ListingView


@admin.register(ListingView)
class ListingViewAdmin(admin.ModelAdmin):
    list_display = ("id", "listing", "user", "view_date", "ip", "timestamp")
    list_filter = ("view_date",)
    search_fields = ("listing__name", "user__email", "ip")
    ordering = ("-timestamp",)
    readonly_fields = ("listing", "user", "view_date", "ip", "user_agent", "timestamp")


@admin.register(AnonymousView)
class AnonymousViewAdmin(admin.ModelAdmin):
    list_display = ("id", "listing", "session_id", "ip", "timestamp")
    list_filter = ("timestamp",)
    search_fields = ("listing__name", "session_id", "ip")
    ordering = ("-timestamp",)
    readonly_fields = ("listing", "session_id", "ip", "user_agent", "timestamp")


@admin.register(ListingLike)
class ListingLikeAdmin(admin.ModelAdmin):
    list_display = ("id", "listing", "user", "timestamp")
    search_fields = ("listing__name", "user__email")
    ordering = ("-timestamp",)
    readonly_fields = ("listing", "user", "timestamp")


@admin.register(ListingSave)
class ListingSaveAdmin(admin.ModelAdmin):
    list_display = ("id", "listing", "user", "timestamp")
    search_fields = ("listing__name", "user__email")
    ordering = ("-timestamp",)
    readonly_fields = ("listing", "user", "timestamp")


@admin.register(Inquiry)
class InquiryAdmin(admin.ModelAdmin):
    list_display = ("id", "listing", "user", "type", "timestamp")
    list_filter = ("type", "timestamp")
    search_fields = ("listing__name", "user__email", "message")
    ordering = ("-timestamp",)
    readonly_fields = ("listing", "user", "type", "message", "timestamp")
