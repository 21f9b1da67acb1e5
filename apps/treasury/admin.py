# treasury/admin.py

from django.contrib import admin
from .models import TreasuryAccount


@admin.register(TreasuryAccount)
class TreasuryAccountAdmin(admin.ModelAdmin):
    list_display = [
        'bank_name',
        'account_number',
        'account_type',
        'balance',
        'is_primary',
        'updated_at',
    ]
    list_filter = [
        'account_type',
        'is_primary',
    ]
    search_fields = [
        'bank_name',
        'account_number',
    ]
    readonly_fields = [
        'balance',
        'is_primary',
        'last_updated_by_id',
        'created_at',
        'updated_at',
    ]
