"""
Tests — Slug encoding, name normalization and slug resolution.

@file geography/tests/test_slugs.py
"""

import re

import pytest

from geography.slugs import DuplicateIdentity, encode_slug, normalize_name, resolve_slug

SLUG_SHAPE = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')

NAMES = [
    'Patópolis',
    'Jd. Italia',
    'São Paulo',
    'New Brunswick/Nouveau-Brunswick',
    'The "Heights" & Co.',
    'République Française!',
    "Santa Bárbara d'Oeste",
    '  Rio   de  Janeiro ',
    'Zürich',
    'St. John\'s',
    'Łódź',
    'Москва',
]


class TestEncodeSlug:
    @pytest.mark.parametrize('text,expected', [
        ('Patópolis', 'patopolis'),
        ('Jd. Italia', 'jd-italia'),
        ('São Paulo', 'sao-paulo'),
        ('New Brunswick/Nouveau-Brunswick', 'new-brunswick-nouveau-brunswick'),
        ('The "Heights" & Co.', 'the-heights-co'),
        ('République Française!', 'republique-francaise'),
        ('snake_case_name', 'snake-case-name'),
    ])
    def test_examples(self, text, expected):
        assert encode_slug(text) == expected

    @pytest.mark.parametrize('text,expected', [
        ('Łódź', 'lodz'),
        ('Straße', 'strasse'),
        ('København', 'kobenhavn'),
        ('Ærøskøbing', 'aeroskobing'),
        ('Москва', 'moskva'),
    ])
    def test_letters_without_decomposition(self, text, expected):
        assert encode_slug(text) == expected

    @pytest.mark.parametrize('name', NAMES)
    def test_shape(self, name):
        slug = encode_slug(name)
        assert SLUG_SHAPE.match(slug)
        assert '--' not in slug

    @pytest.mark.parametrize('name', NAMES)
    def test_idempotent(self, name):
        once = encode_slug(name)
        assert encode_slug(once) == once

    @pytest.mark.parametrize('text', [None, '', '   ', '!!!', '...', '-_-'])
    def test_blank_input(self, text):
        assert encode_slug(text) == ''


class TestNormalizeName:
    @pytest.mark.parametrize('text,expected', [
        ('sao paulo', 'Sao Paulo'),
        ('RIO DE JANEIRO', 'Rio De Janeiro'),
        ('são paulo', 'São Paulo'),
        ("santa bárbara d'oeste", "Santa Bárbara D'oeste"),
        ('  new   york ', 'New York'),
    ])
    def test_titleizes(self, text, expected):
        assert normalize_name(text) == expected

    @pytest.mark.parametrize('text', ['SoHo', 'McAllen', 'New york', 'iPhone City'])
    def test_mixed_case_passes_through(self, text):
        assert normalize_name(text) == text

    def test_none(self):
        assert normalize_name(None) is None


class TestResolveSlug:
    def test_free_candidate(self):
        assert resolve_slug('Patópolis', lambda slug: False, disambiguator='MG') == 'patopolis'

    def test_collision_appends_disambiguator(self):
        taken = {'patopolis'}
        assert resolve_slug('Patópolis', taken.__contains__, disambiguator='MG') == 'patopolis-mg'

    def test_disambiguator_is_encoded(self):
        taken = {'springfield'}
        slug = resolve_slug('Springfield', taken.__contains__, disambiguator='Santa Catarina')
        assert slug == 'springfield-santa-catarina'

    def test_second_collision_is_duplicate(self):
        taken = {'patopolis', 'patopolis-mg'}
        with pytest.raises(DuplicateIdentity) as exc_info:
            resolve_slug('Patópolis', taken.__contains__, disambiguator='MG')
        assert exc_info.value.slug == 'patopolis-mg'

    def test_collision_without_disambiguator_is_duplicate(self):
        with pytest.raises(DuplicateIdentity) as exc_info:
            resolve_slug('Patópolis', lambda slug: True)
        assert exc_info.value.slug == 'patopolis'

    def test_prefix_skips_bare_name(self):
        checked = []

        def is_taken(slug):
            checked.append(slug)
            return False

        assert resolve_slug('Jd. Italia', is_taken, prefix='gotham') == 'gotham-jd-italia'
        assert checked == ['gotham-jd-italia']

    def test_blank_name(self):
        assert resolve_slug('...', lambda slug: True, disambiguator='MG') == ''
