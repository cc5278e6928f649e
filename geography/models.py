"""
Geography — Models

Four-level geopolitical hierarchy: Nation → Region → City → Hood, plus the
user-defined Zone grouping whose members may be any of those four.

Every hierarchy level shares the Geopolitical base (name, slug, abbr,
population, phone/postal overrides). Each concrete model declares its own
parent reference, slug disambiguator and uniqueness scopes; the write
pipeline in services.py consumes those declarations.

@file geography/models.py
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import BaseModel

SLUG_MAX_LENGTH = getattr(settings, 'GEOGRAPHY_SLUG_MAX_LENGTH', 120)


def not_blank(field):
    return ~models.Q(**{field: ''})


# ---------------------------------------------------------------------------
# Shared base
# ---------------------------------------------------------------------------

class Geopolitical(BaseModel):
    """
    Fields and behaviour common to every hierarchy level.

    Class-level declarations read by the write pipeline:
      parent_attr       attribute holding the owning record (None for roots)
      required_parents  FK attributes that must be set
      scoped_unique     (field, scope) pairs; scope None means collection-wide
      slug_parent_attrs FK ids whose change re-derives the slug on update
    """

    name = models.CharField(_('name'), max_length=150)
    abbr = models.CharField(_('abbreviation'), max_length=16, blank=True, default='')
    nick = models.CharField(_('nickname'), max_length=150, blank=True, default='')
    slug = models.SlugField(_('slug'), max_length=SLUG_MAX_LENGTH, unique=True)
    population = models.PositiveBigIntegerField(_('population'), null=True, blank=True)
    phone = models.CharField(_('phone code'), max_length=20, blank=True, default='')
    postal = models.CharField(_('postal code'), max_length=20, blank=True, default='')
    code = models.CharField(_('code'), max_length=30, blank=True, default='')
    gid = models.PositiveIntegerField(_('GeoNames id'), null=True, blank=True)

    parent_attr = None
    required_parents = ()
    scoped_unique = ()
    slug_parent_attrs = ()

    class Meta:
        abstract = True
        ordering = ['name']

    def __str__(self):
        return self.name or self.slug

    @property
    def geo_parent(self):
        if self.parent_attr is None or getattr(self, f'{self.parent_attr}_id') is None:
            return None
        return getattr(self, self.parent_attr)

    @property
    def slug_disambiguator(self):
        """Text appended to the slug when the bare name collides."""
        parent = self.geo_parent
        if parent is None:
            return None
        return parent.abbr or parent.name

    @property
    def slug_prefix(self):
        return None


# ---------------------------------------------------------------------------
# Nation
# ---------------------------------------------------------------------------

class Nation(Geopolitical):
    """
    Sovereign state. Identified by its upper-case abbreviation, e.g. 'BR'.
    """

    id = None
    abbr = models.CharField(_('abbreviation'), max_length=8, primary_key=True)
    tld = models.CharField(_('top-level domain'), max_length=16, blank=True, default='')
    currency = models.CharField(_('currency'), max_length=8, blank=True, default='')
    code3 = models.CharField(_('ISO 3166 alpha-3'), max_length=3, blank=True, default='')
    languages = models.JSONField(_('languages'), default=list, blank=True)
    capital = models.ForeignKey(
        'City',
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=_('capital'),
    )

    scoped_unique = (
        ('abbr', None),
        ('code', None),
    )

    class Meta(Geopolitical.Meta):
        verbose_name = _('nation')
        verbose_name_plural = _('nations')
        indexes = [
            models.Index(fields=['name']),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['code'], condition=not_blank('code'),
                name='nation_unique_code',
            ),
        ]

    @property
    def primary_language(self):
        return self.languages[0] if self.languages else None


# ---------------------------------------------------------------------------
# Region
# ---------------------------------------------------------------------------

class Region(Geopolitical):
    """State / province / department inside a Nation."""

    nation = models.ForeignKey(
        Nation,
        on_delete=models.CASCADE,
        related_name='regions',
        verbose_name=_('nation'),
    )
    timezone = models.CharField(_('timezone'), max_length=64, blank=True, default='')
    capital = models.ForeignKey(
        'City',
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=_('capital'),
    )

    parent_attr = 'nation'
    required_parents = ('nation',)
    scoped_unique = (
        ('name', 'nation'),
        ('abbr', 'nation'),
        ('code', 'nation'),
    )
    slug_parent_attrs = ('nation_id',)

    class Meta(Geopolitical.Meta):
        verbose_name = _('region')
        verbose_name_plural = _('regions')
        indexes = [
            models.Index(fields=['name']),
        ]
        constraints = [
            models.UniqueConstraint(fields=['nation', 'name'], name='region_unique_name_per_nation'),
            models.UniqueConstraint(
                fields=['nation', 'abbr'], condition=not_blank('abbr'),
                name='region_unique_abbr_per_nation',
            ),
            models.UniqueConstraint(
                fields=['nation', 'code'], condition=not_blank('code'),
                name='region_unique_code_per_nation',
            ),
        ]


# ---------------------------------------------------------------------------
# City
# ---------------------------------------------------------------------------

class City(Geopolitical):
    """
    Municipality. Belongs to a Nation and, usually, to one of its Regions.

    The point is stored as two float columns (longitude, latitude), both set
    or both empty. region_abbr caches the Region's abbreviation: it is filled
    on first read and saved with the next write, and is not refreshed when
    the Region's abbreviation later changes.
    """

    nation = models.ForeignKey(
        Nation,
        on_delete=models.CASCADE,
        related_name='cities',
        verbose_name=_('nation'),
    )
    region = models.ForeignKey(
        Region,
        null=True, blank=True,
        on_delete=models.CASCADE,
        related_name='cities',
        verbose_name=_('region'),
    )
    area = models.PositiveIntegerField(_('area'), null=True, blank=True)
    longitude = models.FloatField(_('longitude'), null=True, blank=True)
    latitude = models.FloatField(_('latitude'), null=True, blank=True)
    region_abbr = models.CharField(_('region abbreviation'), max_length=16, blank=True, default='')

    parent_attr = 'region'
    required_parents = ('nation',)
    scoped_unique = (
        ('name', 'region'),
        ('code', 'nation'),
    )
    slug_parent_attrs = ('region_id', 'nation_id')

    class Meta(Geopolitical.Meta):
        verbose_name = _('city')
        verbose_name_plural = _('cities')
        indexes = [
            models.Index(fields=['name']),
            models.Index(fields=['-population']),
            models.Index(fields=['longitude', 'latitude'], name='city_point_idx'),
        ]
        constraints = [
            models.UniqueConstraint(fields=['region', 'name'], name='city_unique_name_per_region'),
            models.UniqueConstraint(
                fields=['nation', 'code'], condition=not_blank('code'),
                name='city_unique_code_per_nation',
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(longitude__isnull=True, latitude__isnull=True)
                    | models.Q(longitude__isnull=False, latitude__isnull=False)
                ),
                name='city_point_complete',
            ),
        ]

    @property
    def geo_parent(self):
        if self.region_id:
            return self.region
        return self.nation if self.nation_id else None

    @property
    def geom(self):
        if self.longitude is None or self.latitude is None:
            return None
        return (self.longitude, self.latitude)

    def get_region_abbr(self):
        """Region abbreviation, cached on first read."""
        if not self.region_abbr and self.region_id:
            self.region_abbr = self.region.abbr
        return self.region_abbr


# ---------------------------------------------------------------------------
# Hood
# ---------------------------------------------------------------------------

class Hood(Geopolitical):
    """Neighbourhood inside a City. Slug is always prefixed by the city's."""

    city = models.ForeignKey(
        City,
        on_delete=models.CASCADE,
        related_name='hoods',
        verbose_name=_('city'),
    )
    rank = models.PositiveIntegerField(_('rank'), null=True, blank=True)

    parent_attr = 'city'
    required_parents = ('city',)
    scoped_unique = (
        ('name', 'city'),
        ('code', 'city'),
    )
    slug_parent_attrs = ('city_id',)

    class Meta(Geopolitical.Meta):
        verbose_name = _('hood')
        verbose_name_plural = _('hoods')
        constraints = [
            models.UniqueConstraint(fields=['city', 'name'], name='hood_unique_name_per_city'),
        ]

    @property
    def slug_disambiguator(self):
        return None

    @property
    def slug_prefix(self):
        return self.city.slug if self.city_id else None


# ---------------------------------------------------------------------------
# Zones
# ---------------------------------------------------------------------------

class Zone(BaseModel):
    """User-defined grouping of nations, regions, cities and hoods."""

    name = models.CharField(_('name'), max_length=150)
    slug = models.SlugField(_('slug'), max_length=SLUG_MAX_LENGTH, unique=True)
    abbr = models.CharField(_('abbreviation'), max_length=16, blank=True, default='')
    kind = models.CharField(_('kind'), max_length=40, blank=True, default='')
    info = models.TextField(_('info'), blank=True, default='')
    active = models.BooleanField(_('active'), default=True, db_index=True)

    parent_attr = None
    required_parents = ()
    scoped_unique = ()
    slug_parent_attrs = ()
    slug_prefix = None

    class Meta:
        verbose_name = _('zone')
        verbose_name_plural = _('zones')
        ordering = ['name']

    def __str__(self):
        return self.name or self.slug

    @property
    def slug_disambiguator(self):
        return self.kind or None


class ZoneMember(BaseModel):
    """
    Membership of one hierarchy record in a Zone.

    The member is a tagged reference (member_kind, member_id) rather than a
    foreign key, so one table can point at any of the four levels.
    """

    class Kind(models.TextChoices):
        NATION = 'NATION', _('Nation')
        REGION = 'REGION', _('Region')
        CITY = 'CITY', _('City')
        HOOD = 'HOOD', _('Hood')

    zone = models.ForeignKey(
        Zone,
        on_delete=models.CASCADE,
        related_name='members',
        verbose_name=_('zone'),
    )
    member_kind = models.CharField(_('member kind'), max_length=10, choices=Kind.choices)
    member_id = models.CharField(_('member id'), max_length=40)

    class Meta:
        verbose_name = _('zone member')
        verbose_name_plural = _('zone members')
        ordering = ['member_kind', 'member_id']
        indexes = [
            models.Index(fields=['member_kind', 'member_id']),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['zone', 'member_kind', 'member_id'],
                name='zone_member_unique',
            ),
        ]

    def __str__(self):
        return f'{self.zone_id}: {self.member_kind} {self.member_id}'


MEMBER_MODELS = {
    ZoneMember.Kind.NATION: Nation,
    ZoneMember.Kind.REGION: Region,
    ZoneMember.Kind.CITY: City,
    ZoneMember.Kind.HOOD: Hood,
}


def member_kind_for(entity):
    """Tag for ``entity``; TypeError for anything that cannot join a Zone."""
    for kind, model in MEMBER_MODELS.items():
        if type(entity) is model:
            return kind
    raise TypeError(f'{type(entity).__name__} cannot be a zone member.')


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------

class Address(BaseModel):
    """
    Street address placed in the hierarchy.

    Any level may be referenced; missing owners are filled upward from the
    most specific one (hood → city → region → nation). The *_name columns
    keep the place names so an address still prints after the referenced
    record is gone. ``addressable`` is a tagged reference (type, id) to
    whatever the address belongs to.
    """

    title = models.CharField(_('title'), max_length=150)
    name = models.CharField(_('street'), max_length=200, blank=True, default='')
    number = models.CharField(_('number'), max_length=20, blank=True, default='')
    extra = models.CharField(_('complement'), max_length=150, blank=True, default='')
    info = models.TextField(_('info'), blank=True, default='')
    zip = models.CharField(_('zip code'), max_length=20, blank=True, default='')

    nation = models.ForeignKey(
        Nation,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='addresses',
        verbose_name=_('nation'),
    )
    region = models.ForeignKey(
        Region,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='addresses',
        verbose_name=_('region'),
    )
    city = models.ForeignKey(
        City,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='addresses',
        verbose_name=_('city'),
    )
    hood = models.ForeignKey(
        Hood,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='addresses',
        verbose_name=_('hood'),
    )

    nation_name = models.CharField(_('nation name'), max_length=150, blank=True, default='')
    region_name = models.CharField(_('region name'), max_length=150, blank=True, default='')
    city_name = models.CharField(_('city name'), max_length=150, blank=True, default='')
    hood_name = models.CharField(_('hood name'), max_length=150, blank=True, default='')

    longitude = models.FloatField(_('longitude'), null=True, blank=True)
    latitude = models.FloatField(_('latitude'), null=True, blank=True)

    addressable_type = models.CharField(_('addressable type'), max_length=60, blank=True, default='')
    addressable_id = models.CharField(_('addressable id'), max_length=40, blank=True, default='')

    class Meta:
        verbose_name = _('address')
        verbose_name_plural = _('addresses')
        ordering = ['title', 'created_at']
        indexes = [
            models.Index(fields=['addressable_type', 'addressable_id']),
            models.Index(fields=['zip']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(longitude__isnull=True, latitude__isnull=True)
                    | models.Q(longitude__isnull=False, latitude__isnull=False)
                ),
                name='address_point_complete',
            ),
        ]

    def __str__(self):
        street = ' '.join(part for part in (self.name, self.number) if part)
        location = self.print_location
        if street and location:
            return f'{street}, {location}'
        return street or location or self.title

    @property
    def geom(self):
        if self.longitude is None or self.latitude is None:
            return None
        return (self.longitude, self.latitude)

    @property
    def print_location(self):
        """'Hood City - Region', leaving out whatever is blank."""
        place = ' '.join(part for part in (self.hood_name, self.city_name) if part)
        return ' - '.join(part for part in (place, self.region_name) if part)

    @property
    def print_full_location(self):
        return ' - '.join(part for part in (self.print_location, self.nation_name) if part)
