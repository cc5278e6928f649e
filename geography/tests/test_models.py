"""
Tests — Geography models: keys, derived properties and storage constraints.

@file geography/tests/test_models.py
"""

import pytest
from django.db import IntegrityError

from geography.models import Address, City, Hood, Nation, Region, ZoneMember, member_kind_for
from tests.factories import (
    AddressFactory,
    CityFactory,
    HoodFactory,
    NationFactory,
    RegionFactory,
    ZoneFactory,
    ZoneMemberFactory,
)


pytestmark = pytest.mark.django_db


class TestNation:
    def test_abbr_is_primary_key(self):
        nation = NationFactory(abbr='BR')
        assert nation.pk == 'BR'
        assert Nation._meta.pk.name == 'abbr'

    def test_primary_language(self):
        assert NationFactory(languages=['pt', 'es']).primary_language == 'pt'
        assert NationFactory(languages=[]).primary_language is None

    def test_str(self):
        assert str(NationFactory(name='Brasil')) == 'Brasil'

    def test_no_parent(self):
        nation = NationFactory()
        assert nation.geo_parent is None
        assert nation.slug_disambiguator is None


class TestRegion:
    def test_parent_is_nation(self):
        region = RegionFactory()
        assert region.geo_parent == region.nation

    def test_disambiguator_prefers_nation_abbr(self):
        region = RegionFactory(nation=NationFactory(abbr='AR'))
        assert region.slug_disambiguator == 'AR'

    def test_unsaved_without_nation(self):
        region = Region(name='Nowhere')
        assert region.geo_parent is None
        assert region.slug_disambiguator is None

    def test_name_unique_per_nation(self):
        region = RegionFactory(name='Acre')
        with pytest.raises(IntegrityError):
            RegionFactory(nation=region.nation, name='Acre')


class TestCity:
    def test_parent_is_region(self):
        city = CityFactory()
        assert city.geo_parent == city.region

    def test_parent_without_region_is_nation(self):
        city = CityFactory(region=None)
        assert city.geo_parent == city.nation

    def test_disambiguator_prefers_region_abbr(self):
        city = CityFactory(region=RegionFactory(abbr='MG'))
        assert city.slug_disambiguator == 'MG'

    def test_geom(self):
        assert CityFactory(longitude=-46.6, latitude=-23.5).geom == (-46.6, -23.5)
        assert CityFactory().geom is None

    def test_point_must_be_complete(self):
        with pytest.raises(IntegrityError):
            CityFactory(longitude=-46.6, latitude=None)

    def test_slug_unique(self):
        CityFactory(slug='gotham')
        with pytest.raises(IntegrityError):
            CityFactory(slug='gotham')

    def test_region_abbr_cached_in_memory(self):
        city = CityFactory(region=RegionFactory(abbr='SP'))
        fresh = City.objects.get(pk=city.pk)
        assert fresh.get_region_abbr() == 'SP'
        assert fresh.region_abbr == 'SP'

    def test_region_abbr_without_region(self):
        assert CityFactory(region=None).get_region_abbr() == ''


class TestHood:
    def test_prefix_is_city_slug(self):
        hood = HoodFactory(city=CityFactory(slug='gotham'))
        assert hood.slug_prefix == 'gotham'
        assert hood.slug_disambiguator is None

    def test_unsaved_without_city(self):
        assert Hood(name='Centro').slug_prefix is None


class TestZoneMember:
    def test_member_kinds(self):
        city = CityFactory()
        assert member_kind_for(city) == ZoneMember.Kind.CITY
        assert member_kind_for(city.region) == ZoneMember.Kind.REGION
        assert member_kind_for(city.nation) == ZoneMember.Kind.NATION
        assert member_kind_for(HoodFactory()) == ZoneMember.Kind.HOOD

    def test_unique_per_zone(self):
        member = ZoneMemberFactory()
        with pytest.raises(IntegrityError):
            ZoneMemberFactory(zone=member.zone, member_id=member.member_id)

    def test_zone_disambiguator_is_kind(self):
        assert ZoneFactory(kind='bloc').slug_disambiguator == 'bloc'
        assert ZoneFactory(kind='').slug_disambiguator is None


class TestAddress:
    def test_str_falls_back_to_title(self):
        assert str(AddressFactory(title='Cabin', name='', number='')) == 'Cabin'

    def test_str_without_place(self):
        assert str(AddressFactory(name='Rua Um', number='10')) == 'Rua Um 10'

    def test_location_skips_blanks(self):
        address = AddressFactory(city_name='Campinas', nation_name='Brasil')
        assert address.print_location == 'Campinas'
        assert address.print_full_location == 'Campinas - Brasil'

    def test_geom(self):
        assert AddressFactory().geom is None
        assert AddressFactory(longitude=1.5, latitude=2.5).geom == (1.5, 2.5)

    def test_point_must_be_complete(self):
        with pytest.raises(IntegrityError):
            AddressFactory(longitude=1.5, latitude=None)

    def test_survives_owner_delete(self):
        city = CityFactory()
        address = AddressFactory(city=city, city_name=city.name)
        city.delete()
        stored = Address.objects.get(pk=address.pk)
        assert stored.city_id is None
        assert stored.city_name == city.name
