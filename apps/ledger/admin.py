# ledger/admin.py

from django.contrib import admin
from .models import LedgerEntry, Category


# =============================================================================
# LEDGER ENTRY ADMIN
# =============================================================================

@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    """Ledger entries are written by the ledger services only"""

    list_display = [
        'date',
        'kind',
        'category',
        'subcategory',
        'member',
        'treasury_account',
        'amount',
        'period_month',
        'period_year',
    ]
    list_filter = [
        'kind',
        'category',
        'period_year',
        'period_month',
        'treasury_account',
    ]
    search_fields = [
        'category',
        'subcategory',
        'remarks',
        'member__full_name',
        'member__member_number',
    ]
    date_hierarchy = 'date'
    list_select_related = ['member', 'treasury_account']

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =============================================================================
# CATEGORY ADMIN
# =============================================================================

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = [
        'name',
        'category_type',
        'subcategory_list',
        'is_active',
    ]
    list_filter = [
        'category_type',
        'is_active',
    ]
    search_fields = [
        'name',
    ]
    readonly_fields = [
        'created_at',
        'updated_at',
        'created_by_id',
        'updated_by_id',
    ]

    def subcategory_list(self, obj):
        return ", ".join(obj.subcategories or []) or "-"
    subcategory_list.short_description = 'Subcategories'
