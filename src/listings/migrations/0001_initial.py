import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import src.listings.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Listing",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField()),
                ("address", models.CharField(max_length=300)),
                ("type", models.CharField(choices=[("rent", "Rent"), ("sale", "Sale")], max_length=8)),
                (
                    "regular_price",
                    models.DecimalField(
                        decimal_places=2, max_digits=14, validators=[django.core.validators.MinValueValidator(0)]
                    ),
                ),
                (
                    "discount_price",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        choices=[("USD", "US Dollar"), ("UGX", "Ugandan Shilling")], default="UGX", max_length=3
                    ),
                ),
                ("bedrooms", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("bathrooms", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("furnished", models.BooleanField(default=False)),
                ("parking", models.BooleanField(default=False)),
                ("offer", models.BooleanField(default=False)),
                ("image_urls", models.JSONField(default=list, validators=[src.listings.models.validate_image_urls])),
                ("approved", models.BooleanField(default=False)),
                ("rejection_reason", models.CharField(blank=True, max_length=500, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("views", models.PositiveIntegerField(default=0)),
                ("likes", models.PositiveIntegerField(default=0)),
                ("saves", models.PositiveIntegerField(default=0)),
                ("inquiries", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="approved_listings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user_ref",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="listings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["approved"], name="listing_approved_idx"),
                    models.Index(fields=["type"], name="listing_type_idx"),
                    models.Index(fields=["created_at"], name="listing_created_idx"),
                    models.Index(fields=["regular_price"], name="listing_price_idx"),
                ],
            },
        ),
    ]
