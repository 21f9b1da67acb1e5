# investments/admin.py

from django.contrib import admin
from .models import Investment


@admin.register(Investment)
class InvestmentAdmin(admin.ModelAdmin):
    list_display = [
        'project_name',
        'capital_amount',
        'cumulative_profit',
        'roi_display',
        'status',
        'funding_account',
        'date',
    ]
    list_filter = [
        'status',
        'date',
    ]
    search_fields = [
        'project_name',
        'remarks',
    ]
    readonly_fields = [
        'capital_amount',
        'cumulative_profit',
        'funding_account',
        'recorded_by_id',
        'created_at',
        'updated_at',
    ]

    def roi_display(self, obj):
        return f"{obj.roi}%"
    roi_display.short_description = 'ROI'

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        # Closing an investment goes through InvestmentService.liquidate_investment
        return False
