"""
Geography — URL Configuration

@file geography/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    AddressViewSet,
    CityViewSet,
    HoodViewSet,
    NationViewSet,
    RegionViewSet,
    ZoneViewSet,
)

app_name = 'geography'

router = DefaultRouter()
router.register('nations', NationViewSet, basename='nation')
router.register('regions', RegionViewSet, basename='region')
router.register('cities', CityViewSet, basename='city')
router.register('hoods', HoodViewSet, basename='hood')
router.register('zones', ZoneViewSet, basename='zone')
router.register('addresses', AddressViewSet, basename='address')

urlpatterns = [
    path('', include(router.urls)),
]
