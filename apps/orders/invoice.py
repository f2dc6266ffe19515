from django.conf import settings
from django.template.loader import render_to_string

from apps.utils.utils import format_long_date, format_paise


def invoice_context(order) -> dict:
    """
    Amounts on the invoice: subtotal is the order total, tax is added on top.
    """
    subtotal = order.total_amount_in_paise
    unit_price = int(order.price_per_unit * 100)
    tax = round(subtotal * settings.INVOICE_TAX_RATE / 100)
    payment = getattr(order, 'payment', None)
    return {
        "order": order,
        "business_name": settings.PROJECT_NAME,
        "invoice_date": format_long_date(order.created_at),
        "delivery_date": format_long_date(order.delivery_date),
        "unit_price": format_paise(unit_price),
        "subtotal": format_paise(subtotal),
        "tax_rate": settings.INVOICE_TAX_RATE,
        "tax": format_paise(tax),
        "total": format_paise(subtotal + tax),
        "payment_status": order.status.lower(),
        "payment_mode": payment.provider if payment else "N/A",
    }


def render_invoice(order) -> str:
    return render_to_string("orders/invoice.html", invoice_context(order))
