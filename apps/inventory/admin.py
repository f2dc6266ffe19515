from django.contrib import admin

from .models import MonthlyInventory, InventoryStatusLog


class InventoryStatusLogInline(admin.TabularInline):
    model = InventoryStatusLog
    extra = 0
    readonly_fields = ('active', 'reason', 'created_by', 'created_at')
    can_delete = False


@admin.register(MonthlyInventory)
class MonthlyInventoryAdmin(admin.ModelAdmin):
    list_display = ('month', 'max_quantity', 'current_quantity', 'active', 'updated_at')
    list_filter = ('active',)
    search_fields = ('month',)
    inlines = [InventoryStatusLogInline]


@admin.register(InventoryStatusLog)
class InventoryStatusLogAdmin(admin.ModelAdmin):
    list_display = ('inventory', 'active', 'reason', 'created_by', 'created_at')
    list_filter = ('active',)
    readonly_fields = ('inventory', 'active', 'reason', 'created_by', 'created_at')
