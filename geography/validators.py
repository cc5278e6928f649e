"""
Geography — Hierarchy Validation

Collects every consistency problem of a record about to be written, keyed
by field, instead of stopping at the first one:

  missing_required_field       name / slug / owning record absent
  scoped_uniqueness_violation  name, abbr or code repeated inside its scope
  hierarchy_mismatch           a City whose Region sits in another Nation
  duplicate_identity           slug already used in the collection

validate_address runs the matching checks for an Address.

@file geography/validators.py
"""

from collections import defaultdict

from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from core.constants import (
    DUPLICATE_IDENTITY,
    HIERARCHY_MISMATCH,
    MISSING_REQUIRED_FIELD,
    SCOPED_UNIQUENESS_VIOLATION,
)

from .models import City, Nation

CASE_INSENSITIVE_FIELDS = ('abbr', 'code')


def missing_required_field(field):
    return ValidationError(
        _('%(field)s is required.'),
        code=MISSING_REQUIRED_FIELD,
        params={'field': field},
    )


def scoped_uniqueness_violation(field, scope):
    if scope is None:
        return ValidationError(
            _('%(field)s has already been taken.'),
            code=SCOPED_UNIQUENESS_VIOLATION,
            params={'field': field, 'scope': None},
        )
    return ValidationError(
        _('%(field)s must be unique within its %(scope)s.'),
        code=SCOPED_UNIQUENESS_VIOLATION,
        params={'field': field, 'scope': scope},
    )


def hierarchy_mismatch():
    return ValidationError(
        _('Region belongs to a different nation than the city.'),
        code=HIERARCHY_MISMATCH,
    )


def owner_mismatch(field, owner):
    return ValidationError(
        _('%(field)s does not belong to the given %(owner)s.'),
        code=HIERARCHY_MISMATCH,
        params={'field': field, 'owner': owner},
    )


def duplicate_identity(slug):
    return ValidationError(
        _('Slug "%(slug)s" is already taken.'),
        code=DUPLICATE_IDENTITY,
        params={'slug': slug},
    )


def _others(instance):
    qs = type(instance)._default_manager.all()
    if not instance._state.adding:
        qs = qs.exclude(pk=instance.pk)
    return qs


def _check_presence(instance, errors):
    if not instance.name:
        errors['name'].append(missing_required_field('name'))
    elif not instance.slug:
        errors['slug'].append(missing_required_field('slug'))

    if isinstance(instance, Nation) and not instance.abbr:
        errors['abbr'].append(missing_required_field('abbr'))

    for parent in instance.required_parents:
        if getattr(instance, f'{parent}_id') is None:
            errors[parent].append(missing_required_field(parent))


def _check_scoped_uniqueness(instance, errors):
    for field, scope in instance.scoped_unique:
        value = getattr(instance, field)
        if not value:
            continue
        lookup = f'{field}__iexact' if field in CASE_INSENSITIVE_FIELDS else field
        filters = {lookup: value}
        if scope is not None:
            scope_id = getattr(instance, f'{scope}_id')
            if scope_id is None:
                # No parent means no scope: the slug check still applies.
                continue
            filters[f'{scope}_id'] = scope_id
        if _others(instance).filter(**filters).exists():
            errors[field].append(scoped_uniqueness_violation(field, scope))


def _check_slug(instance, errors):
    if instance.slug and _others(instance).filter(slug=instance.slug).exists():
        errors['slug'].append(duplicate_identity(instance.slug))


def _check_region_in_nation(instance, errors):
    if not isinstance(instance, City):
        return
    if instance.region_id is None or instance.nation_id is None:
        return
    if instance.region.nation_id != instance.nation_id:
        errors['region'].append(hierarchy_mismatch())


def validate(instance, errors=None):
    """
    Run every hierarchy check on ``instance``.

    ``errors`` may carry problems gathered by earlier pipeline stages; new
    ones are appended. Returns a plain dict of field -> [ValidationError].
    """
    collected = defaultdict(list)
    for field, field_errors in (errors or {}).items():
        collected[field].extend(field_errors)

    _check_presence(instance, collected)
    _check_scoped_uniqueness(instance, collected)
    if 'slug' not in collected:
        _check_slug(instance, collected)
    _check_region_in_nation(instance, collected)

    return dict(collected)


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------

ADDRESS_CHAIN = (
    ('hood', 'city'),
    ('city', 'region'),
    ('city', 'nation'),
    ('region', 'nation'),
)


def validate_address(address):
    """
    Check an Address before it is written: a title, a complete point and
    references that agree with each other (the hood's city is the city,
    and so on up to the nation).
    """
    errors = defaultdict(list)

    if not address.title:
        errors['title'].append(missing_required_field('title'))

    if (address.longitude is None) != (address.latitude is None):
        missing = 'latitude' if address.latitude is None else 'longitude'
        errors[missing].append(missing_required_field(missing))

    for child, owner in ADDRESS_CHAIN:
        if getattr(address, f'{child}_id') is None or getattr(address, f'{owner}_id') is None:
            continue
        if getattr(getattr(address, child), f'{owner}_id') != getattr(address, f'{owner}_id'):
            errors[child].append(owner_mismatch(child, owner))

    return dict(errors)
