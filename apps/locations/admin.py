from django.contrib import admin

from .models import Location, Pincode


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ('state', 'district', 'pin_code', 'min_quantity', 'max_quantity', 'price_per_unit', 'is_active')
    list_filter = ('is_active', 'state')
    search_fields = ('state', 'district', 'pin_code')
    list_editable = ('is_active',)


@admin.register(Pincode)
class PincodeAdmin(admin.ModelAdmin):
    list_display = ('pincode', 'office_name', 'district', 'state')
    list_filter = ('state',)
    search_fields = ('pincode', 'office_name', 'district')
