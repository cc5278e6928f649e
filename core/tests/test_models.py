"""
Core — Model Tests

Tests for the base model mixins, exercised through concrete models.

@file core/tests/test_models.py
"""

import uuid

import pytest

from tests.factories import NationFactory, ZoneFactory


@pytest.mark.django_db
class TestBaseModel:
    def test_uuid_primary_key(self):
        zone = ZoneFactory()
        assert isinstance(zone.pk, uuid.UUID)

    def test_timestamps(self):
        zone = ZoneFactory()
        assert zone.created_at is not None
        first = zone.updated_at
        zone.info = 'changed'
        zone.save()
        assert zone.updated_at >= first
        assert zone.created_at <= zone.updated_at

    def test_nation_keeps_timestamps_without_uuid(self):
        nation = NationFactory(abbr='BR')
        assert nation.pk == 'BR'
        assert nation.created_at is not None
