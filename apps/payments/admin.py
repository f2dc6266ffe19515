from django.contrib import admin
from .models import Payment, Refund, WebhookLog


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('razorpay_order_id', 'order', 'amount_in_paise', 'status', 'razorpay_payment_id', 'created_at')
    list_filter = ('status', 'provider', 'created_at')
    search_fields = ('razorpay_order_id', 'razorpay_payment_id', 'order__order_id')
    readonly_fields = ('razorpay_signature',)


@admin.register(Refund)
class RefundAdmin(admin.ModelAdmin):
    list_display = ('refund_id', 'order', 'amount_in_paise', 'status', 'processed_at', 'failed_at')
    list_filter = ('status', 'created_at')
    search_fields = ('refund_id', 'order__order_id')
    readonly_fields = ('metadata',)


@admin.register(WebhookLog)
class WebhookLogAdmin(admin.ModelAdmin):
    list_display = ('event_id', 'event', 'provider', 'is_processed', 'created_at')
    list_filter = ('is_processed', 'event', 'created_at')
    search_fields = ('event_id',)
    readonly_fields = ('payload',)
