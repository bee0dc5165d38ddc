from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .models import Property


class PropertySerializer(serializers.ModelSerializer):
    """Serializer used for every property read and write"""

    class Meta:
        model = Property
        fields = [
            'id', 'name', 'address', 'description', 'is_active',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_name(self, value):
        """Validate property name uniqueness"""
        instance = getattr(self, 'instance', None)
        if Property.objects.filter(name=value).exclude(
            pk=instance.pk if instance else None
        ).exists():
            raise serializers.ValidationError(
                _("A property with this name already exists.")
            )
        return value
