from django.db import models
from django.utils.translation import gettext_lazy as _


class Property(models.Model):
    name = models.CharField(
        max_length=100,
        verbose_name=_("Property name"),
        help_text=_("Unique identity name of the property"),
        unique=True,
    )

    address = models.CharField(
        max_length=200,
        verbose_name=_("Address"),
        help_text=_("Physical address of the property"),
    )

    description = models.TextField(
        blank=True,
        null=True,
        verbose_name=_("Description"),
        help_text=_("Detailed description of the property"),
    )

    is_active = models.BooleanField(
        default=True,
        verbose_name=_("Active Status"),
        help_text=_("Whether this property is currently active"),
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name=_("Created At"),
        help_text=_("Date and time when the property was created"),
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name=_("Updated At"),
        help_text=_("Date and time when the property was last updated"),
    )

    class Meta:
        verbose_name = _('Property')
        verbose_name_plural = _('Properties')
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active'], name='property_is_active_idx'),
        ]

    def __str__(self):
        return self.name
