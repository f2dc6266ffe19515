from django.dispatch import Signal

# Fired after a storefront order (and its gateway order) is stored.
# args: order_id
order_created = Signal()

# Customer asked for a refund on a paid order.
# args: order_id, reason
order_refund_requested = Signal()
