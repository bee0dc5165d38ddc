from django.contrib import admin
from .models import Property


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    """Admin interface for Property model."""

    list_display = [
        'id',
        'name',
        'address',
        'is_active',
        'created_at',
        'updated_at',
    ]

    list_filter = [
        'is_active',
        'created_at',
    ]

    search_fields = [
        'name',
        'address',
        'description',
    ]

    readonly_fields = ['created_at', 'updated_at']
    ordering = ['name']
