# notifications/admin.py

from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = [
        'title',
        'member',
        'notification_type',
        'delivered',
        'read',
        'sent_at',
    ]
    list_filter = [
        'notification_type',
        'delivered',
        'read',
        'sent_at',
    ]
    search_fields = [
        'title',
        'body',
        'member__full_name',
        'member__member_number',
    ]
    readonly_fields = [
        'sent_at',
        'read_at',
        'created_at',
        'updated_at',
    ]
