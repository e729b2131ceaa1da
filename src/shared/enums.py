from django.db.models import TextChoices


class ListingType(TextChoices):
    RENT = "rent", "Rent"
    SALE = "sale", "Sale"


class Currency(TextChoices):
    USD = "USD", "US Dollar"
    UGX = "UGX", "Ugandan Shilling"


class InquiryType(TextChoices):
    CALL = "call", "Call"
    EMAIL = "email", "Email"
    MESSAGE = "message", "Message"
    GENERAL = "general", "General"
