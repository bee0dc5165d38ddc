from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters

from utils.resources import ResourceViewSet
from .models import Property
from .serializers import PropertySerializer


class PropertyViewSet(ResourceViewSet):
    """
    Properties exposed through the generic resource actions
    """
    queryset = Property.objects.all()
    serializer_class = PropertySerializer
    filter_backends = [DjangoFilterBackend,
                       filters.SearchFilter, filters.OrderingFilter]

    filterset_fields = {
        'is_active': ['exact'],
        'created_at': ['gte', 'lte'],
    }

    search_fields = ['name', 'address', 'description']
    ordering_fields = ['name', 'created_at', 'updated_at']
    ordering = ['name']
