"""
Geography — Views

ViewSets for the geopolitical hierarchy. Records are addressed by slug.
Writes go through GeographyService so the full normalization / slug /
validation pipeline runs; lists accept ?q= for slug prefix search and
?exact=1 for exact slug match.

@file geography/views.py
"""

from django.conf import settings
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.exceptions import BusinessRuleViolation

from .geo import parse_point
from .models import MEMBER_MODELS, Address, City, Hood, Nation, Region, Zone, ZoneMember
from .serializers import (
    AddressReadSerializer,
    AddressWriteSerializer,
    CityReadSerializer,
    CityWriteSerializer,
    HoodReadSerializer,
    HoodWriteSerializer,
    NationReadSerializer,
    NationWriteSerializer,
    NearbyCitySerializer,
    RegionReadSerializer,
    RegionWriteSerializer,
    ZoneMemberReadSerializer,
    ZoneMemberWriteSerializer,
    ZoneReadSerializer,
    ZoneWriteSerializer,
)
from .services import AddressService, GeographyService

TRUTHY = {'1', 'true', 'yes', 'on'}


class GeopoliticalViewSet(viewsets.ModelViewSet):
    """Shared CRUD + slug search. Subclasses set model and serializers."""

    model = None
    read_serializer_class = None
    write_serializer_class = None
    select_related = ()
    lookup_field = 'slug'
    ordering_fields = ['name', 'slug', 'population', 'created_at']

    def get_queryset(self):
        query = self.request.query_params.get('q')
        if query is not None:
            exact = self.request.query_params.get('exact', '').lower() in TRUTHY
            qs = GeographyService.search(self.model, query, exact=exact)
        else:
            qs = GeographyService.ordered(self.model)
        if self.select_related:
            qs = qs.select_related(*self.select_related)
        return qs

    def get_object(self):
        obj = GeographyService.get(self.model, self.kwargs[self.lookup_field])
        self.check_object_permissions(self.request, obj)
        return obj

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return self.write_serializer_class
        return self.read_serializer_class

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        instance = GeographyService.create(self.model, **serializer.validated_data)
        read_serializer = self.read_serializer_class(instance, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        instance = GeographyService.update(instance, **serializer.validated_data)
        read_serializer = self.read_serializer_class(instance, context=self.get_serializer_context())
        return Response(read_serializer.data)

    def perform_destroy(self, instance):
        GeographyService.delete(instance)


class NationViewSet(GeopoliticalViewSet):
    model = Nation
    read_serializer_class = NationReadSerializer
    write_serializer_class = NationWriteSerializer
    filterset_fields = ['currency', 'tld']


class RegionViewSet(GeopoliticalViewSet):
    model = Region
    read_serializer_class = RegionReadSerializer
    write_serializer_class = RegionWriteSerializer
    select_related = ('nation',)
    filterset_fields = ['nation', 'timezone']


class CityViewSet(GeopoliticalViewSet):
    """
    Cities, plus:
      GET nearby/?point=lon,lat&limit=n   nearest first
      GET by-population/                  most populous first
    """

    model = City
    read_serializer_class = CityReadSerializer
    write_serializer_class = CityWriteSerializer
    select_related = ('nation', 'region__nation')
    filterset_fields = ['nation', 'region']

    @action(detail=False, methods=['get'], url_path='nearby')
    def nearby(self, request):
        raw_point = request.query_params.get('point')
        if not raw_point:
            raise BusinessRuleViolation(detail='The point parameter is required (lon,lat).')
        origin = parse_point(raw_point)
        try:
            limit = int(request.query_params.get(
                'limit', getattr(settings, 'GEOGRAPHY_NEARBY_DEFAULT_LIMIT', 20),
            ))
        except ValueError:
            raise BusinessRuleViolation(detail='limit must be an integer.')
        qs = GeographyService.nearby(origin, limit=limit).select_related('nation', 'region')
        serializer = NearbyCitySerializer(qs, many=True, context={'origin': origin})
        return Response(serializer.data)

    @action(detail=False, methods=['get'], url_path='by-population')
    def by_population(self, request):
        qs = GeographyService.population_ordered().select_related('nation', 'region')
        page = self.paginate_queryset(qs)
        if page is not None:
            serializer = CityReadSerializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        serializer = CityReadSerializer(qs, many=True)
        return Response(serializer.data)


class HoodViewSet(GeopoliticalViewSet):
    model = Hood
    read_serializer_class = HoodReadSerializer
    write_serializer_class = HoodWriteSerializer
    select_related = ('city__region__nation', 'city__nation')
    filterset_fields = ['city']


class ZoneViewSet(GeopoliticalViewSet):
    """Zones and their polymorphic members."""

    model = Zone
    read_serializer_class = ZoneReadSerializer
    write_serializer_class = ZoneWriteSerializer
    ordering_fields = ['name', 'slug', 'kind', 'created_at']
    filterset_fields = ['kind', 'active']

    def get_serializer_class(self):
        if self.action == 'members' and self.request.method == 'POST':
            return ZoneMemberWriteSerializer
        return super().get_serializer_class()

    @action(detail=True, methods=['get', 'post'], url_path='members')
    def members(self, request, slug=None):
        zone = self.get_object()
        if request.method == 'POST':
            serializer = ZoneMemberWriteSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            kind = ZoneMember.Kind(serializer.validated_data['member_kind'])
            entity = GeographyService.get(MEMBER_MODELS[kind], serializer.validated_data['member'])
            member = GeographyService.add_member(zone, entity)
            return Response(ZoneMemberReadSerializer(member).data, status=status.HTTP_201_CREATED)

        serializer = ZoneMemberReadSerializer(zone.members.all(), many=True)
        return Response(serializer.data)


class AddressViewSet(viewsets.ModelViewSet):
    """
    Street addresses, addressed by id. Writes go through AddressService,
    which fills the owner chain and the cached place names.

    ?addressable_type=&addressable_id= lists the addresses of one owner.
    """

    queryset = Address.objects.select_related('nation', 'region', 'city', 'hood')
    ordering_fields = ['title', 'zip', 'created_at']
    filterset_fields = ['nation', 'region', 'city', 'hood', 'zip', 'addressable_type', 'addressable_id']

    def get_object(self):
        obj = AddressService.get(self.kwargs[self.lookup_field])
        self.check_object_permissions(self.request, obj)
        return obj

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return AddressWriteSerializer
        return AddressReadSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        address = AddressService.create(**serializer.validated_data)
        return Response(AddressReadSerializer(address).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        address = self.get_object()
        serializer = self.get_serializer(address, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        address = AddressService.update(address, **serializer.validated_data)
        return Response(AddressReadSerializer(address).data)

    def perform_destroy(self, instance):
        AddressService.delete(instance)
