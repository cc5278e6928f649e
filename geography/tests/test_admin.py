"""
Tests — Admin forms run the write pipeline.

@file geography/tests/test_admin.py
"""

import pytest
from django.urls import reverse

from geography.models import Address, City, Hood, Nation
from geography.services import GeographyService
from tests.factories import NationFactory, RegionFactory


pytestmark = pytest.mark.django_db


class TestCityAdmin:
    def test_add_derives_name_and_slug(self, admin_client, brazil):
        url = reverse('admin:geography_city_add')
        resp = admin_client.post(url, {'name': 'gotham city', 'nation': 'BR', 'slug': ''})
        assert resp.status_code == 302
        city = City.objects.get()
        assert city.name == 'Gotham City'
        assert city.slug == 'gotham-city'

    def test_add_mismatch_shows_error(self, admin_client, brazil):
        other = RegionFactory(nation=NationFactory(abbr='AR'))
        url = reverse('admin:geography_city_add')
        resp = admin_client.post(url, {'name': 'Gotham', 'nation': 'BR', 'region': str(other.pk)})
        assert resp.status_code == 200
        assert 'region' in resp.context['adminform'].form.errors
        assert not City.objects.exists()

    def test_delete_runs_cascade(self, admin_client, brazil):
        city = GeographyService.create(City, name='Gotham', nation=brazil)
        url = reverse('admin:geography_city_delete', args=[city.pk])
        resp = admin_client.post(url, {'post': 'yes'})
        assert resp.status_code == 302
        assert not City.objects.exists()


class TestNationAdmin:
    def test_add_upcases_abbr(self, admin_client):
        url = reverse('admin:geography_nation_add')
        resp = admin_client.post(url, {'abbr': 'us', 'name': 'United States', 'languages': '[]'})
        assert resp.status_code == 302
        assert Nation.objects.get().pk == 'US'


class TestAddressAdmin:
    def test_add_fills_owners_from_hood(self, admin_client, brazil, sao_paulo):
        city = GeographyService.create(City, name='Campinas', region=sao_paulo)
        hood = GeographyService.create(Hood, name='Cambuí', city=city)
        url = reverse('admin:geography_address_add')
        resp = admin_client.post(url, {'title': 'Office', 'name': 'Rua Maria Monteiro', 'hood': str(hood.pk)})
        assert resp.status_code == 302
        address = Address.objects.get()
        assert (address.city_id, address.region_id, address.nation_id) == (city.pk, sao_paulo.pk, 'BR')
        assert address.print_full_location == 'Cambuí Campinas - São Paulo - Brasil'

    def test_add_requires_title(self, admin_client, brazil):
        url = reverse('admin:geography_address_add')
        resp = admin_client.post(url, {'title': '', 'nation': 'BR'})
        assert resp.status_code == 200
        assert 'title' in resp.context['adminform'].form.errors
        assert not Address.objects.exists()
