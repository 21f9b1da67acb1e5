# members/admin.py

from django.contrib import admin
from .models import Member


# =============================================================================
# MEMBER ADMIN
# =============================================================================

@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = [
        'member_number',
        'full_name',
        'branch',
        'shares',
        'monthly_subscription_per_share',
        'lifetime_deposited',
        'joining_date',
        'status',
    ]
    list_filter = [
        'status',
        'branch',
        'joining_date',
    ]
    search_fields = [
        'member_number',
        'full_name',
        'national_id',
        'email',
        'phone',
    ]
    readonly_fields = [
        'member_number',
        'lifetime_deposited',
        'created_at',
        'updated_at',
        'created_by_id',
        'updated_by_id',
    ]

    fieldsets = (
        ('Identity', {
            'fields': (
                'member_number',
                'full_name',
                'national_id',
                'status',
            )
        }),
        ('Contact', {
            'fields': (
                'email',
                'phone',
                'branch',
            )
        }),
        ('Shares', {
            'fields': (
                'shares',
                'monthly_subscription_per_share',
                'joining_date',
                'lifetime_deposited',
            )
        }),
        ('Audit', {
            'fields': (
                'created_at',
                'updated_at',
                'created_by_id',
                'updated_by_id',
            ),
            'classes': ('collapse',)
        }),
    )
