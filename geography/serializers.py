"""
Geography — Serializers

Read serializers expose the derived values (effective phone/postal,
qualified names). Write serializers only check shapes: every consistency
rule runs in GeographyService, so model-level unique validators are
switched off here.

@file geography/serializers.py
"""

from rest_framework import serializers

from core.exceptions import ResourceNotFoundError

from .geo import distance_km
from .inheritance import effective_phone, effective_postal
from .models import Address, City, Hood, Nation, Region, Zone, ZoneMember
from .services import GeographyService

GEO_READ_FIELDS = [
    'name', 'slug', 'abbr', 'nick', 'code', 'gid', 'population',
    'phone', 'postal', 'effective_phone', 'effective_postal',
    'created_at', 'updated_at',
]
GEO_WRITE_FIELDS = ['name', 'slug', 'abbr', 'nick', 'code', 'gid', 'population', 'phone', 'postal']


class PointPairMixin:
    """Longitude and latitude are set together; a partial update counts what is stored."""

    def validate(self, attrs):
        attrs = super().validate(attrs)
        point = {
            key: attrs[key] if key in attrs else getattr(self.instance, key, None)
            for key in ('longitude', 'latitude')
        }
        if (point['longitude'] is None) != (point['latitude'] is None):
            raise serializers.ValidationError(
                {'longitude': 'Longitude and latitude must be given together.'},
            )
        return attrs


class GeopoliticalReadSerializer(serializers.ModelSerializer):
    effective_phone = serializers.SerializerMethodField()
    effective_postal = serializers.SerializerMethodField()

    def get_effective_phone(self, obj):
        return effective_phone(obj)

    def get_effective_postal(self, obj):
        return effective_postal(obj)


class GeopoliticalWriteSerializer(serializers.ModelSerializer):
    slug = serializers.CharField(max_length=120, required=False, allow_blank=True)


# ---------------------------------------------------------------------------
# Nation
# ---------------------------------------------------------------------------

class NationMinimalSerializer(serializers.ModelSerializer):
    class Meta:
        model = Nation
        fields = ['abbr', 'name', 'slug']


class NationReadSerializer(GeopoliticalReadSerializer):
    capital_city_id = serializers.CharField(source='capital_id', read_only=True, default=None)
    primary_language = serializers.CharField(read_only=True)

    class Meta:
        model = Nation
        fields = GEO_READ_FIELDS + [
            'tld', 'currency', 'code3', 'languages', 'primary_language', 'capital_city_id',
        ]
        read_only_fields = fields


class NationWriteSerializer(GeopoliticalWriteSerializer):
    abbr = serializers.CharField(max_length=8)

    class Meta:
        model = Nation
        fields = GEO_WRITE_FIELDS + ['tld', 'currency', 'code3', 'languages', 'capital']
        validators = []


# ---------------------------------------------------------------------------
# Region
# ---------------------------------------------------------------------------

class RegionReadSerializer(GeopoliticalReadSerializer):
    nation_abbr = serializers.CharField(source='nation_id', read_only=True)
    capital_city_id = serializers.CharField(source='capital_id', read_only=True, default=None)

    class Meta:
        model = Region
        fields = ['id'] + GEO_READ_FIELDS + ['timezone', 'nation', 'nation_abbr', 'capital_city_id']
        read_only_fields = fields


class RegionWriteSerializer(GeopoliticalWriteSerializer):
    class Meta:
        model = Region
        fields = GEO_WRITE_FIELDS + ['nation', 'timezone', 'capital']
        validators = []


# ---------------------------------------------------------------------------
# City
# ---------------------------------------------------------------------------

class CityReadSerializer(GeopoliticalReadSerializer):
    region_abbr = serializers.CharField(source='get_region_abbr', read_only=True)
    qualified_name = serializers.SerializerMethodField()
    fully_qualified_name = serializers.SerializerMethodField()
    geom = serializers.ListField(child=serializers.FloatField(), read_only=True, allow_null=True)

    class Meta:
        model = City
        fields = ['id'] + GEO_READ_FIELDS + [
            'nation', 'region', 'region_abbr', 'area',
            'longitude', 'latitude', 'geom',
            'qualified_name', 'fully_qualified_name',
        ]
        read_only_fields = fields

    def get_qualified_name(self, obj):
        return GeographyService.qualified_name(obj)

    def get_fully_qualified_name(self, obj):
        return GeographyService.fully_qualified_name(obj)


class NearbyCitySerializer(CityReadSerializer):
    distance_km = serializers.SerializerMethodField()

    class Meta(CityReadSerializer.Meta):
        fields = CityReadSerializer.Meta.fields + ['distance_km']
        read_only_fields = fields

    def get_distance_km(self, obj):
        origin = self.context.get('origin')
        if origin is None or obj.geom is None:
            return None
        return round(distance_km(origin, obj.geom), 3)


class CityWriteSerializer(PointPairMixin, GeopoliticalWriteSerializer):
    nation = serializers.PrimaryKeyRelatedField(queryset=Nation.objects.all(), required=False)

    class Meta:
        model = City
        fields = GEO_WRITE_FIELDS + ['nation', 'region', 'area', 'longitude', 'latitude']
        validators = []


# ---------------------------------------------------------------------------
# Hood
# ---------------------------------------------------------------------------

class HoodReadSerializer(GeopoliticalReadSerializer):
    city_slug = serializers.CharField(source='city.slug', read_only=True)

    class Meta:
        model = Hood
        fields = ['id'] + GEO_READ_FIELDS + ['city', 'city_slug', 'rank']
        read_only_fields = fields


class HoodWriteSerializer(GeopoliticalWriteSerializer):
    class Meta:
        model = Hood
        fields = GEO_WRITE_FIELDS + ['city', 'rank']
        validators = []


# ---------------------------------------------------------------------------
# Zone
# ---------------------------------------------------------------------------

class ZoneReadSerializer(serializers.ModelSerializer):
    members_count = serializers.IntegerField(source='members.count', read_only=True)

    class Meta:
        model = Zone
        fields = ['id', 'name', 'slug', 'abbr', 'kind', 'info', 'active', 'members_count', 'created_at']
        read_only_fields = fields


class ZoneWriteSerializer(serializers.ModelSerializer):
    slug = serializers.CharField(max_length=120, required=False, allow_blank=True)

    class Meta:
        model = Zone
        fields = ['name', 'slug', 'abbr', 'kind', 'info', 'active']
        validators = []


class ZoneMemberWriteSerializer(serializers.Serializer):
    member_kind = serializers.ChoiceField(choices=ZoneMember.Kind.choices)
    member = serializers.CharField(help_text='Primary key or slug of the member record.')


class ZoneMemberReadSerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()
    slug = serializers.SerializerMethodField()

    class Meta:
        model = ZoneMember
        fields = ['id', 'member_kind', 'member_id', 'name', 'slug']
        read_only_fields = fields

    def _member(self, obj):
        cache = self.context.setdefault('resolved_members', {})
        if obj.pk not in cache:
            try:
                cache[obj.pk] = GeographyService.resolve_member(obj)
            except ResourceNotFoundError:
                # Member record was deleted; the row is reported without details.
                cache[obj.pk] = None
        return cache[obj.pk]

    def get_name(self, obj):
        member = self._member(obj)
        return GeographyService.display_name(member) if member else None

    def get_slug(self, obj):
        member = self._member(obj)
        return member.slug if member else None


# ---------------------------------------------------------------------------
# Address
# ---------------------------------------------------------------------------

ADDRESS_FIELDS = [
    'title', 'name', 'number', 'extra', 'info', 'zip',
    'nation', 'region', 'city', 'hood',
    'longitude', 'latitude', 'addressable_type', 'addressable_id',
]


class AddressReadSerializer(serializers.ModelSerializer):
    geom = serializers.ListField(child=serializers.FloatField(), read_only=True, allow_null=True)
    location = serializers.CharField(source='print_location', read_only=True)
    full_location = serializers.CharField(source='print_full_location', read_only=True)

    class Meta:
        model = Address
        fields = ['id'] + ADDRESS_FIELDS + [
            'nation_name', 'region_name', 'city_name', 'hood_name',
            'geom', 'location', 'full_location', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class AddressWriteSerializer(PointPairMixin, serializers.ModelSerializer):
    class Meta:
        model = Address
        fields = ADDRESS_FIELDS + ['nation_name', 'region_name', 'city_name', 'hood_name']
        validators = []
