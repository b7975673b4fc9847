from django.contrib import admin

from .models import Donation, Donor


@admin.register(Donor)
class DonorAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "phone")
    search_fields = ("name", "email")


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display = ("donor", "amount", "donation_type", "status", "is_recurring", "donation_date")
    list_filter = ("donation_type", "status", "is_recurring")
    search_fields = ("donor__name", "donor__email")
