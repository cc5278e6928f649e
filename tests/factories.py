"""
Geopolitical — Test Factories

Factory Boy factories for generating test data. Used across all test
modules.

Records are created through the ORM directly with explicit slugs; tests
that exercise the write pipeline call GeographyService instead.

@file tests/factories.py
"""

import factory

from geography.models import Address, City, Hood, Nation, Region, Zone, ZoneMember


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------

class NationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Nation
        django_get_or_create = ('abbr',)

    abbr = factory.Sequence(lambda n: f'N{n:03d}')
    name = factory.Sequence(lambda n: f'Nation {n}')
    slug = factory.Sequence(lambda n: f'nation-{n}')
    currency = 'USD'
    languages = factory.LazyFunction(lambda: ['en'])


class RegionFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Region

    nation = factory.SubFactory(NationFactory)
    name = factory.Sequence(lambda n: f'Region {n}')
    slug = factory.Sequence(lambda n: f'region-{n}')
    abbr = factory.Sequence(lambda n: f'R{n}')


class CityFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = City

    region = factory.SubFactory(RegionFactory)
    nation = factory.LazyAttribute(lambda o: o.region.nation if o.region else NationFactory())
    name = factory.Sequence(lambda n: f'City {n}')
    slug = factory.Sequence(lambda n: f'city-{n}')


class HoodFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Hood

    city = factory.SubFactory(CityFactory)
    name = factory.Sequence(lambda n: f'Hood {n}')
    slug = factory.LazyAttributeSequence(lambda o, n: f'{o.city.slug}-hood-{n}')


# ---------------------------------------------------------------------------
# Zones
# ---------------------------------------------------------------------------

class ZoneFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Zone

    name = factory.Sequence(lambda n: f'Zone {n}')
    slug = factory.Sequence(lambda n: f'zone-{n}')
    kind = 'custom'


class ZoneMemberFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ZoneMember

    zone = factory.SubFactory(ZoneFactory)
    member_kind = ZoneMember.Kind.CITY
    member_id = factory.LazyFunction(lambda: str(CityFactory().pk))


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------

class AddressFactory(factory.django.DjangoModelFactory):
    """Bare address; use AddressService.create to get owners and names filled."""

    class Meta:
        model = Address

    title = factory.Sequence(lambda n: f'Address {n}')
    name = factory.Sequence(lambda n: f'Street {n}')
    number = '100'
