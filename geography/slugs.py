"""
Geography — Slugs & Names

Canonical identifier derivation for every geopolitical record:
  encode_slug     text -> lowercase ASCII token joined by hyphens
  normalize_name  titleizes names typed without deliberate mixed case
  resolve_slug    collision-free slug using one parent disambiguator

@file geography/slugs.py
"""

import logging
import re
import unicodedata

from django.utils.text import slugify
from unidecode import unidecode

from core.constants import DUPLICATE_IDENTITY

logger = logging.getLogger('geopolitical')

NON_ALNUM = re.compile(r'[\W_]+')
MIXED_CASE = re.compile(r'[A-Z][a-z]')
WORD_START = re.compile(r"(?<![\w'’`])\w")


class DuplicateIdentity(Exception):
    """Slug still collides after appending the disambiguator."""

    code = DUPLICATE_IDENTITY

    def __init__(self, slug, message=None):
        self.slug = slug
        super().__init__(message or f'Slug "{slug}" is already taken.')


def encode_slug(text) -> str:
    """
    Transliterate ``text`` into a URL-safe token.

    'Patópolis' -> 'patopolis', 'Jd. Italia' -> 'jd-italia',
    'New Brunswick/Nouveau-Brunswick' -> 'new-brunswick-nouveau-brunswick',
    'Łódź' -> 'lodz', 'Москва' -> 'moskva'.
    Blank or all-punctuation input returns ''.
    """
    if text is None:
        return ''
    value = unidecode(unicodedata.normalize('NFKC', str(text))).replace('.', '')
    # Separators become spaces first so that '/', '&', quotes etc. turn
    # into hyphens instead of vanishing inside slugify.
    return slugify(NON_ALNUM.sub(' ', value))


def normalize_name(text):
    """Title-case ``text`` unless it already carries mixed case ('SoHo')."""
    if text is None:
        return None
    value = ' '.join(str(text).split())
    if MIXED_CASE.search(value):
        return value
    return WORD_START.sub(lambda m: m.group(0).upper(), value.lower())


def resolve_slug(base_name, is_taken, disambiguator=None, prefix=None) -> str:
    """
    Return the first free slug for ``base_name``.

    ``is_taken`` is a callable answering whether a slug already exists in the
    same collection. With ``prefix`` the bare name is never tried: the
    candidate is ``prefix-name`` straight away. On collision the encoded
    ``disambiguator`` is appended once; a second collision raises
    DuplicateIdentity.
    """
    candidate = encode_slug(base_name)
    if prefix and candidate:
        candidate = f'{prefix}-{candidate}'
    if not candidate:
        return ''
    if not is_taken(candidate):
        return candidate

    suffix = encode_slug(disambiguator)
    if not suffix:
        raise DuplicateIdentity(candidate)

    disambiguated = f'{candidate}-{suffix}'
    if is_taken(disambiguated):
        raise DuplicateIdentity(disambiguated)

    logger.debug('Slug %s taken, disambiguated to %s.', candidate, disambiguated)
    return disambiguated
