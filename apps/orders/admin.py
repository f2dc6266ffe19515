import json
from django.contrib import admin
from django.utils.html import format_html
from .models import Order, ProgressTracker


class ProgressTrackerInline(admin.StackedInline):
    model = ProgressTracker
    extra = 0
    can_delete = False
    readonly_fields = ('current_stage', 'progress_percentage', 'updated_at')


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        'order_id',
        'full_name',
        'phone',
        'status',
        'refund_status',
        'quantity',
        'total_amount_in_paise',
        'delivery_date',
        'is_bulk_upload',
        'created_at',
    )
    list_filter = ('status', 'refund_status', 'is_bulk_upload', 'state', 'created_at')
    search_fields = ('order_id', 'full_name', 'phone', 'email', 'payment__razorpay_order_id')
    inlines = [ProgressTrackerInline]

    readonly_fields = (
        'order_id',
        'user',
        'total_amount_in_paise',
        'status',
        'refund_status',
        'refund_request_date',
        'formatted_metadata',
        'created_at',
        'updated_at',
    )

    fieldsets = (
        ('Order Details', {
            'fields': ('order_id', 'user', 'status', 'product_name', 'quantity', 'delivery_date')
        }),
        ('Financials', {
            'fields': ('price_per_unit', 'total_amount_in_paise', 'payment_method')
        }),
        ('Customer & Delivery', {
            'fields': (
                'full_name', 'email', 'phone', 'whatsapp', 'delivery_address',
                'state', 'district', 'pincode', 'area_name', 'delivery_location',
            )
        }),
        ('Refund', {
            'fields': ('refund_status', 'refund_request_date')
        }),
        ('System Data', {
            'fields': ('formatted_metadata', 'is_bulk_upload', 'terms_accepted', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False

    @admin.display(description="Metadata")
    def formatted_metadata(self, obj):
        if not obj.metadata:
            return "-"
        return format_html("<pre>{}</pre>", json.dumps(obj.metadata, indent=2))
