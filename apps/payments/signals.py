from django.dispatch import Signal

# Payment captured, from checkout verification or the payment.captured webhook.
# args: order_id, source ("checkout" | "webhook")
payment_captured = Signal()
