from django.urls import re_path
from . import views

app_name = 'properties'

# The viewset defines a ``patch`` action, so PATCH is switched off on the collection.
property_collection = views.PropertyViewSet.as_view({
    'get': 'index',
    'post': 'create',
}, http_method_names=['get', 'post', 'head', 'options'])

property_member = views.PropertyViewSet.as_view({
    'get': 'show',
    'put': 'upsert',
    'patch': 'patch',
    'delete': 'destroy',
})

urlpatterns = [
    re_path(r'^properties/?$', property_collection, name='property-list'),
    re_path(r'^properties/(?P<pk>[^/]+)/?$', property_member, name='property-detail'),
]
