# fines/admin.py

from django.contrib import admin
from .models import FinePolicy


@admin.register(FinePolicy)
class FinePolicyAdmin(admin.ModelAdmin):
    list_display = [
        'grace_period_months',
        'fine_percentage',
        'last_updated_by_id',
        'updated_at',
    ]
    readonly_fields = [
        'last_updated_by_id',
        'created_at',
        'updated_at',
    ]

    def has_add_permission(self, request):
        return not FinePolicy.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
