"""
Geography — Django Admin Configuration

Admin for every hierarchy level. Admin forms run the same write pipeline
as the API (GeographyService.prepare), so names, slugs and hierarchy
checks behave identically; pipeline errors show up on the form fields.

@file geography/admin.py
"""

from django import forms
from django.contrib import admin
from django.core.exceptions import NON_FIELD_ERRORS, ValidationError
from django.forms.models import construct_instance
from django.utils.translation import gettext_lazy as _

from .inheritance import effective_phone, effective_postal
from .models import Address, City, Hood, Nation, Region, Zone, ZoneMember
from .services import AddressService, GeographyService

TIMESTAMPS_FIELDSET = (_('Timestamps'), {
    'fields': ('created_at', 'updated_at'),
    'classes': ('collapse',),
})


class PipelineAdminForm(forms.ModelForm):
    """ModelForm whose clean() runs the geography write pipeline."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if 'slug' in self.fields:
            self.fields['slug'].required = False

    def clean(self):
        cleaned_data = super().clean()
        if self.errors:
            return cleaned_data

        instance = self.instance
        adding = instance._state.adding
        before = {attr: getattr(instance, attr) for attr in instance.slug_parent_attrs}
        construct_instance(self, instance)
        rederive = not adding and any(
            getattr(instance, attr) != old for attr, old in before.items()
        )
        explicit_slug = cleaned_data.get('slug') if 'slug' in self.changed_data else None

        try:
            GeographyService.prepare(instance, explicit_slug=explicit_slug, rederive=rederive)
        except ValidationError as exc:
            raise ValidationError({
                field if field in self.fields else NON_FIELD_ERRORS: errors
                for field, errors in exc.error_dict.items()
            })

        for field in ('name', 'slug', 'abbr', 'nation'):
            if field in cleaned_data:
                cleaned_data[field] = getattr(instance, field)
        return cleaned_data


class GeopoliticalAdmin(admin.ModelAdmin):
    """Shared admin: pipeline-backed form, effective phone/postal columns."""

    form = PipelineAdminForm
    search_fields = ('name', 'slug', 'abbr', 'code')
    readonly_fields = ('created_at', 'updated_at', 'effective_phone', 'effective_postal')
    show_full_result_count = False
    list_per_page = 50
    ordering = ('name',)

    def delete_model(self, request, obj):
        GeographyService.delete(obj)

    @admin.display(description=_('Effective phone'))
    def effective_phone(self, obj):
        return effective_phone(obj) or '—'

    @admin.display(description=_('Effective postal'))
    def effective_postal(self, obj):
        return effective_postal(obj) or '—'


@admin.register(Nation)
class NationAdmin(GeopoliticalAdmin):
    list_display = ('abbr', 'name', 'slug', 'tld', 'currency', 'population', 'regions_count')
    search_fields = ('name', 'slug', 'abbr', 'code3')
    raw_id_fields = ('capital',)

    fieldsets = (
        (None, {
            'fields': ('abbr', 'name', 'slug', 'nick', 'code', 'code3', 'gid', 'population'),
        }),
        (_('Details'), {
            'fields': ('tld', 'currency', 'languages', 'capital'),
        }),
        (_('Contact codes'), {
            'fields': ('phone', 'postal', 'effective_phone', 'effective_postal'),
        }),
        TIMESTAMPS_FIELDSET,
    )

    def get_readonly_fields(self, request, obj=None):
        readonly = super().get_readonly_fields(request, obj)
        if obj is not None:
            return tuple(readonly) + ('abbr',)
        return readonly

    @admin.display(description=_('Regions'))
    def regions_count(self, obj):
        return obj.regions.count()


@admin.register(Region)
class RegionAdmin(GeopoliticalAdmin):
    list_display = ('name', 'abbr', 'slug', 'nation', 'timezone', 'population')
    list_filter = ('nation',)
    list_select_related = ('nation',)
    raw_id_fields = ('capital',)


@admin.register(City)
class CityAdmin(GeopoliticalAdmin):
    list_display = ('name', 'slug', 'region_display', 'nation', 'population', 'point_display')
    list_filter = ('nation',)
    list_select_related = ('nation', 'region')
    raw_id_fields = ('region',)
    readonly_fields = GeopoliticalAdmin.readonly_fields + ('region_abbr',)

    @admin.display(description=_('Region'))
    def region_display(self, obj):
        if obj.region_id:
            return f'{obj.region.name} ({obj.region.abbr or obj.region.slug})'
        return '—'

    @admin.display(description=_('Point'))
    def point_display(self, obj):
        if obj.geom is None:
            return '—'
        return '{:.4f}, {:.4f}'.format(*obj.geom)


@admin.register(Hood)
class HoodAdmin(GeopoliticalAdmin):
    list_display = ('name', 'slug', 'city', 'rank', 'population')
    list_select_related = ('city',)
    raw_id_fields = ('city',)


class ZoneMemberInline(admin.TabularInline):
    model = ZoneMember
    extra = 0
    fields = ('member_kind', 'member_id')


@admin.register(Zone)
class ZoneAdmin(admin.ModelAdmin):
    form = PipelineAdminForm
    list_display = ('name', 'slug', 'kind', 'active', 'members_count')
    list_filter = ('kind', 'active')
    search_fields = ('name', 'slug')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [ZoneMemberInline]

    def delete_model(self, request, obj):
        GeographyService.delete(obj)

    @admin.display(description=_('Members'))
    def members_count(self, obj):
        return obj.members.count()


class AddressAdminForm(forms.ModelForm):
    """Runs AddressService.prepare so owners and place names are filled on save."""

    def clean(self):
        cleaned_data = super().clean()
        if self.errors:
            return cleaned_data
        construct_instance(self, self.instance)
        try:
            AddressService.prepare(self.instance)
        except ValidationError as exc:
            raise ValidationError({
                field if field in self.fields else NON_FIELD_ERRORS: errors
                for field, errors in exc.error_dict.items()
            })
        for field in ('nation', 'region', 'city'):
            cleaned_data[field] = getattr(self.instance, field)
        return cleaned_data


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):
    form = AddressAdminForm
    list_display = ('title', '__str__', 'zip', 'city_name', 'nation_name')
    list_filter = ('nation',)
    search_fields = ('title', 'name', 'zip', 'city_name')
    raw_id_fields = ('region', 'city', 'hood')
    readonly_fields = ('nation_name', 'region_name', 'city_name', 'hood_name', 'created_at', 'updated_at')

    fieldsets = (
        (None, {
            'fields': ('title', 'name', 'number', 'extra', 'zip', 'info'),
        }),
        (_('Place'), {
            'fields': (
                'hood', 'city', 'region', 'nation',
                'hood_name', 'city_name', 'region_name', 'nation_name',
                'longitude', 'latitude',
            ),
        }),
        (_('Owner'), {
            'fields': ('addressable_type', 'addressable_id'),
            'classes': ('collapse',),
        }),
        TIMESTAMPS_FIELDSET,
    )

    def delete_model(self, request, obj):
        AddressService.delete(obj)
