"""
Geopolitical — Root conftest for pytest

Shared fixtures available to all test modules.

@file conftest.py
"""

import pytest
from rest_framework.test import APIClient

from geography.models import Region
from geography.services import GeographyService
from tests.factories import NationFactory


@pytest.fixture
def api_client():
    """DRF test client."""
    return APIClient()


@pytest.fixture
def brazil(db):
    """Nation BR with national phone and postal codes."""
    return NationFactory(abbr='BR', name='Brasil', slug='brasil', phone='55', postal='00000-000')


@pytest.fixture
def sao_paulo(brazil):
    return GeographyService.create(Region, nation=brazil, name='São Paulo', abbr='SP')


@pytest.fixture
def minas(brazil):
    return GeographyService.create(Region, nation=brazil, name='Minas Gerais', abbr='MG')
