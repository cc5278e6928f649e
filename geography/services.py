"""
Geography — Service Layer

Write pipeline and queries for the geopolitical hierarchy.

Every create / update runs, in order, before anything is saved:
  1. name normalization      (slugs.normalize_name)
  2. default derivation      (abbr upcase, City nation from Region)
  3. slug resolution         (slugs.resolve_slug)
  4. hierarchy validation    (validators.validate)
All problems are raised together as one ValidationError keyed by field.

AddressService runs the equivalent pipeline for street addresses: owners
filled upward, place names cached, then validators.validate_address.

@file geography/services.py
"""

import logging
import math

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F

from core.exceptions import BusinessRuleViolation, CascadeDeleteError, ResourceNotFoundError

from . import inheritance, validators
from .geo import parse_point, planar_distance
from .models import (
    MEMBER_MODELS,
    Address,
    City,
    Geopolitical,
    Hood,
    Nation,
    Region,
    Zone,
    ZoneMember,
    member_kind_for,
)
from .slugs import DuplicateIdentity, encode_slug, normalize_name, resolve_slug

logger = logging.getLogger('geopolitical')

READ_ONLY_FIELDS = {'id', 'pk', 'created_at', 'updated_at'}


def _is_count(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value >= 0 and value == int(value)


class GeographyService:
    """Create / update / delete and read queries for every hierarchy level."""

    # -----------------------------------------------------------------------
    # Write pipeline
    # -----------------------------------------------------------------------

    @staticmethod
    def _normalize(instance) -> None:
        instance.name = normalize_name(instance.name) or ''

    @staticmethod
    def _apply_defaults(instance) -> None:
        if isinstance(instance, Nation) and instance.abbr:
            instance.abbr = instance.abbr.strip().upper()
        if isinstance(instance, City) and instance.nation_id is None and instance.region_id:
            instance.nation_id = instance.region.nation_id

    @staticmethod
    def _slug_is_taken(instance):
        model = type(instance)

        def is_taken(slug):
            qs = model._default_manager.filter(slug=slug)
            if not instance._state.adding:
                qs = qs.exclude(pk=instance.pk)
            return qs.exists()

        return is_taken

    @staticmethod
    def _resolve_slug(instance, explicit_slug=None, rederive=False) -> dict:
        """
        Fill instance.slug. Returns slug errors, if any.

        An explicit slug is only encoded; uniqueness is left to the
        validator. A stored slug is kept unless ``rederive`` is set.
        """
        if explicit_slug:
            instance.slug = encode_slug(explicit_slug)
            return {}
        if instance.slug and not rederive:
            return {}
        if not instance.name:
            instance.slug = ''
            return {}
        if instance.slug_prefix is None and isinstance(instance, Hood):
            # City missing; reported by the presence check.
            instance.slug = ''
            return {}
        try:
            instance.slug = resolve_slug(
                instance.name,
                GeographyService._slug_is_taken(instance),
                disambiguator=instance.slug_disambiguator,
                prefix=instance.slug_prefix,
            )
        except DuplicateIdentity as exc:
            instance.slug = exc.slug
            return {'slug': [validators.duplicate_identity(exc.slug)]}
        return {}

    @staticmethod
    def prepare(instance, explicit_slug=None, rederive=False) -> None:
        """Run the write pipeline on an unsaved change; raises ValidationError."""
        GeographyService._normalize(instance)
        GeographyService._apply_defaults(instance)
        errors = GeographyService._resolve_slug(instance, explicit_slug, rederive)
        errors = validators.validate(instance, errors)
        if errors:
            raise ValidationError(errors)

    @staticmethod
    def _save(instance, force_insert=False) -> None:
        """Save, mapping a lost uniqueness race to a duplicate_identity error."""
        try:
            with transaction.atomic():
                instance.save(force_insert=force_insert)
        except IntegrityError as exc:
            logger.warning('Uniqueness race on %s %s: %s', type(instance).__name__, instance.slug, exc)
            raise ValidationError({'slug': [validators.duplicate_identity(instance.slug)]})

    @staticmethod
    def create(model, **fields):
        """Validate and persist a new ``model`` record built from ``fields``."""
        explicit_slug = fields.pop('slug', None)
        for key in READ_ONLY_FIELDS:
            fields.pop(key, None)
        instance = model(**fields)
        GeographyService.prepare(instance, explicit_slug=explicit_slug)
        GeographyService._save(instance, force_insert=True)
        logger.info('%s %s created.', model.__name__, instance.slug)
        return instance

    @staticmethod
    def update(instance_or_pk, model=None, **fields):
        """
        Apply ``fields`` to an existing record and re-run the pipeline.

        The slug is kept unless a new one is given or the parent that
        disambiguates it changed. Nation abbreviations cannot change.
        """
        if isinstance(instance_or_pk, (Geopolitical, Zone)):
            instance = instance_or_pk
            model = type(instance)
        else:
            instance = GeographyService.get(model, instance_or_pk)

        if isinstance(instance, Nation) and 'abbr' in fields:
            if (fields['abbr'] or '').strip().upper() != instance.pk:
                raise ValidationError({'abbr': [ValidationError(
                    'The abbreviation identifies the nation and cannot change.',
                    code='immutable',
                )]})

        explicit_slug = fields.pop('slug', None)
        for key in READ_ONLY_FIELDS:
            fields.pop(key, None)

        before = {attr: getattr(instance, attr) for attr in instance.slug_parent_attrs}
        for field, value in fields.items():
            setattr(instance, field, value)
        GeographyService._apply_defaults(instance)
        parent_changed = any(
            getattr(instance, attr) != old for attr, old in before.items()
        )
        if isinstance(instance, City) and before.get('region_id') != instance.region_id:
            instance.region_abbr = ''

        GeographyService.prepare(
            instance, explicit_slug=explicit_slug, rederive=parent_changed,
        )
        GeographyService._save(instance)
        logger.info('%s %s updated.', model.__name__, instance.slug)
        return instance

    # -----------------------------------------------------------------------
    # Deletion
    # -----------------------------------------------------------------------

    @staticmethod
    def _owned_children(instance):
        """Records owned directly by ``instance``."""
        if isinstance(instance, Nation):
            return list(instance.regions.all()) + list(instance.cities.filter(region__isnull=True))
        if isinstance(instance, Region):
            return list(instance.cities.all())
        if isinstance(instance, City):
            return list(instance.hoods.all())
        if isinstance(instance, Zone):
            return list(instance.members.all())
        return []

    @staticmethod
    def _delete_tree(instance) -> int:
        removed = 0
        children = GeographyService._owned_children(instance)
        for child in children:
            try:
                removed += GeographyService._delete_tree(child)
            except CascadeDeleteError:
                raise
            except DatabaseError as exc:
                logger.warning(
                    'Cascade delete of %s stopped at %s: %s', instance, child, exc,
                )
                # The surrounding transaction rolls back, so no child is gone.
                raise CascadeDeleteError(remaining=[str(c) for c in children])
        instance.delete()
        return removed + 1

    @staticmethod
    def delete(instance) -> int:
        """
        Delete ``instance`` and everything it owns, children first.

        Runs in one transaction: if any child cannot be removed nothing is
        deleted and CascadeDeleteError lists the children left behind.
        Returns the number of records removed.
        """
        with transaction.atomic():
            removed = GeographyService._delete_tree(instance)
        logger.info('%s %s deleted with %d record(s).', type(instance).__name__, instance, removed)
        return removed

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    @staticmethod
    def get(model, key):
        """Fetch by primary key or slug; ResourceNotFoundError otherwise."""
        qs = model._default_manager.all()
        try:
            return qs.get(slug=key)
        except model.DoesNotExist:
            pass
        try:
            return qs.get(pk=key)
        except (model.DoesNotExist, ValueError, ValidationError):
            raise ResourceNotFoundError(detail=f'{model.__name__} {key} not found.')

    @staticmethod
    def ordered(model):
        return model._default_manager.order_by('name')

    @staticmethod
    def population_ordered():
        return City.objects.order_by(F('population').desc(nulls_last=True), 'slug')

    @staticmethod
    def search(model, query, exact=False):
        """
        Slug lookup. The query is encoded like stored slugs; exact matches the
        whole slug, otherwise every slug starting with it, ordered by slug.
        """
        key = encode_slug(query)
        qs = model._default_manager.all()
        if not key:
            return qs.none()
        if exact:
            return qs.filter(slug=key)
        return qs.filter(slug__istartswith=key).order_by('slug')

    @staticmethod
    def nearby(point, limit=None):
        """
        Cities with a point, nearest to ``point`` first, ties by slug.

        ``limit`` of None or infinity returns every city; anything else must
        be a non-negative whole number.
        """
        origin = parse_point(point)
        qs = (
            City.objects.filter(longitude__isnull=False, latitude__isnull=False)
            .annotate(distance=planar_distance(origin))
            .order_by('distance', 'slug')
        )
        if limit is None or limit == math.inf:
            return qs
        if not _is_count(limit):
            raise BusinessRuleViolation(detail=f'limit must be a non-negative integer, got {limit!r}.')
        return qs[:int(limit)]

    # -----------------------------------------------------------------------
    # Derived accessors
    # -----------------------------------------------------------------------

    @staticmethod
    def effective_phone(entity):
        return inheritance.effective_phone(entity)

    @staticmethod
    def effective_postal(entity):
        return inheritance.effective_postal(entity)

    @staticmethod
    def display_name(entity) -> str:
        return entity.name or entity.slug

    @staticmethod
    def qualified_name(city, separator=None) -> str:
        """'Name<sep>REGION' using the cached region abbreviation or region name."""
        if separator is None:
            separator = getattr(settings, 'GEOGRAPHY_QUALIFIED_SEPARATOR', ', ')
        parts = [GeographyService.display_name(city)]
        if city.region_id:
            parts.append(city.get_region_abbr() or city.region.name)
        return separator.join(parts)

    @staticmethod
    def fully_qualified_name(city, separator=None) -> str:
        if separator is None:
            separator = getattr(settings, 'GEOGRAPHY_QUALIFIED_SEPARATOR', ', ')
        return separator.join([GeographyService.qualified_name(city, separator), city.nation.abbr])

    # -----------------------------------------------------------------------
    # Zones
    # -----------------------------------------------------------------------

    @staticmethod
    def add_member(zone, entity) -> ZoneMember:
        kind = member_kind_for(entity)
        member, created = ZoneMember.objects.get_or_create(
            zone=zone, member_kind=kind, member_id=str(entity.pk),
        )
        if created:
            logger.info('%s %s joined zone %s.', kind, entity.pk, zone.slug)
        return member

    @staticmethod
    def remove_member(zone, entity) -> bool:
        deleted, _ = ZoneMember.objects.filter(
            zone=zone, member_kind=member_kind_for(entity), member_id=str(entity.pk),
        ).delete()
        return bool(deleted)

    @staticmethod
    def resolve_member(member: ZoneMember):
        """The Nation / Region / City / Hood a membership row points at."""
        model = MEMBER_MODELS[ZoneMember.Kind(member.member_kind)]
        try:
            return model._default_manager.get(pk=member.member_id)
        except (model.DoesNotExist, ValueError, ValidationError):
            raise ResourceNotFoundError(
                detail=f'{member.member_kind} {member.member_id} not found.',
            )

    @staticmethod
    def zones_for(entity):
        ids = ZoneMember.objects.filter(
            member_kind=member_kind_for(entity), member_id=str(entity.pk),
        ).values('zone_id')
        return Zone.objects.filter(pk__in=ids).order_by('name')


# Most specific first.
ADDRESS_OWNERS = ('hood', 'city', 'region', 'nation')


class AddressService:
    """Create / update / delete and lookups for street addresses."""

    @staticmethod
    def _fill_owners(address) -> None:
        """Complete the owner chain upward from the most specific reference."""
        if address.hood_id and address.city_id is None:
            address.city_id = address.hood.city_id
        if address.city_id:
            if address.region_id is None:
                address.region_id = address.city.region_id
            if address.nation_id is None:
                address.nation_id = address.city.nation_id
        if address.region_id and address.nation_id is None:
            address.nation_id = address.region.nation_id

    @staticmethod
    def _refresh_names(address) -> None:
        for level in ADDRESS_OWNERS:
            if getattr(address, f'{level}_id') is not None:
                setattr(address, f'{level}_name', getattr(address, level).name)

    @staticmethod
    def _assign(address, fields) -> None:
        for key in READ_ONLY_FIELDS:
            fields.pop(key, None)
        if 'geom' in fields:
            geom = fields.pop('geom')
            if geom in (None, ''):
                address.longitude = address.latitude = None
            else:
                address.longitude, address.latitude = parse_point(geom)
        for field, value in fields.items():
            setattr(address, field, value)

    @staticmethod
    def prepare(address) -> None:
        """Fill owners and place names, then validate; raises ValidationError."""
        AddressService._fill_owners(address)
        AddressService._refresh_names(address)
        errors = validators.validate_address(address)
        if errors:
            raise ValidationError(errors)

    @staticmethod
    def create(**fields) -> Address:
        address = Address()
        AddressService._assign(address, fields)
        AddressService.prepare(address)
        address.save(force_insert=True)
        logger.info('Address %s created in %s.', address.pk, address.print_full_location or '-')
        return address

    @staticmethod
    def update(address, **fields) -> Address:
        """
        Apply ``fields`` and re-run the pipeline.

        Moving an address to another hood, city or region drops the coarser
        owners that were not given as well, so they are derived again.
        """
        given = {
            level: getattr(fields[key], 'pk', fields[key])
            for level in ADDRESS_OWNERS
            for key in (level, f'{level}_id')
            if key in fields
        }
        for index, level in enumerate(ADDRESS_OWNERS):
            if level not in given or given[level] == getattr(address, f'{level}_id'):
                continue
            for coarser in ADDRESS_OWNERS[index + 1:]:
                if coarser not in given:
                    setattr(address, f'{coarser}_id', None)
                    setattr(address, f'{coarser}_name', '')

        AddressService._assign(address, fields)
        AddressService.prepare(address)
        address.save()
        logger.info('Address %s updated.', address.pk)
        return address

    @staticmethod
    def delete(address) -> None:
        pk = address.pk
        address.delete()
        logger.info('Address %s deleted.', pk)

    @staticmethod
    def get(key) -> Address:
        try:
            return Address.objects.get(pk=key)
        except (Address.DoesNotExist, ValueError, ValidationError):
            raise ResourceNotFoundError(detail=f'Address {key} not found.')

    @staticmethod
    def for_addressable(addressable_type, addressable_id):
        return Address.objects.filter(
            addressable_type=addressable_type, addressable_id=str(addressable_id),
        )
