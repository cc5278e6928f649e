"""
Geopolitical — Root URL Configuration

All API endpoints are namespaced under /api/v1/.
The DRF browsable API is available for route inspection in development.

@file config/urls.py
"""

from django.contrib import admin
from django.urls import include, path
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework.reverse import reverse

admin.site.site_header = 'Geopolitical Administration'
admin.site.site_title = 'Geopolitical'
admin.site.index_title = 'Nations, regions, cities and hoods'


@api_view(['GET'])
def api_root(request, format=None):
    """Geopolitical API v1 — endpoint directory."""
    return Response({
        'geography': {
            'nations': reverse('api-v1:geography:nation-list', request=request, format=format),
            'regions': reverse('api-v1:geography:region-list', request=request, format=format),
            'cities': reverse('api-v1:geography:city-list', request=request, format=format),
            'nearby': reverse('api-v1:geography:city-nearby', request=request, format=format),
            'hoods': reverse('api-v1:geography:hood-list', request=request, format=format),
            'zones': reverse('api-v1:geography:zone-list', request=request, format=format),
            'addresses': reverse('api-v1:geography:address-list', request=request, format=format),
        },
    })


api_v1_patterns = [
    path('', api_root, name='api-root'),
    path('geography/', include('geography.urls', namespace='geography')),
]

urlpatterns = [
    path('admin/', admin.site.urls),

    # Versioned API
    path('api/v1/', include((api_v1_patterns, 'api-v1'))),
]
