# core/admin.py

from django import forms
from django.contrib import admin
from .models import SaccoConfiguration


@admin.register(SaccoConfiguration)
class SaccoConfigurationAdmin(admin.ModelAdmin):
    list_display = [
        'society_name',
        'currency_code',
        'operational_timezone',
        'enable_email_notifications',
        'enable_in_app_notifications',
    ]
    readonly_fields = [
        'created_at',
        'updated_at',
    ]

    def has_add_permission(self, request):
        return not SaccoConfiguration.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False

    def formfield_for_dbfield(self, db_field, request, **kwargs):
        if db_field.name == 'currency_code':
            return forms.ChoiceField(
                label=db_field.verbose_name,
                choices=SaccoConfiguration.get_currency_choices(),
                initial=db_field.default,
                help_text=db_field.help_text,
            )
        return super().formfield_for_dbfield(db_field, request, **kwargs)
