# apps/analytics/services.py
import logging
from datetime import datetime

from django.contrib.auth import get_user_model
from django.db.models import Sum
from django.utils import timezone

from apps.orders.models import Order, OrderStatus
from apps.payments.models import Payment, PaymentStatus
from apps.utils.exceptions import BusinessLogicException
from apps.utils.utils import add_months, month_start, format_rupees, start_of_day

logger = logging.getLogger(__name__)

PERIOD_MONTHS = {
    "last3months": 3,
    "last6months": 6,
    "last12months": 12,
}
DEFAULT_PERIOD = "last6months"
INVALID_PERIOD = "Invalid period parameter. Use last3months, last6months or last12months"
INVALID_DATE = "Invalid date format. Use YYYY-MM-DD format."


def percent_change(current, previous) -> int:
    if not previous:
        return 0
    return round((current - previous) / previous * 100)


def _parse_day(value):
    try:
        return datetime.strptime(str(value), "%Y-%m-%d").date()
    except ValueError:
        raise BusinessLogicException(INVALID_DATE, code="invalid_date")


def _paise_sum(qs, field) -> int:
    return qs.aggregate(total=Sum(field))["total"] or 0


class DashboardService:
    """
    Admin dashboard numbers. Money leaves this service in whole rupees.
    """

    @staticmethod
    def _visitors():
        return get_user_model().objects.customers()

    @staticmethod
    def _captured():
        return Payment.objects.filter(status=PaymentStatus.CAPTURED)

    @staticmethod
    def _card(label, current, previous, money=False) -> dict:
        change_value = percent_change(current, previous)
        sign = "+" if change_value >= 0 else "-"
        card = {
            "count": round(current),
            "change": f"{sign}{abs(change_value)}%",
            "change_value": change_value,
            "label": label,
            "period": "from last month",
        }
        if money:
            card["formatted"] = format_rupees(current)
        return card

    @staticmethod
    def overview(now=None) -> dict:
        now = now or timezone.now()
        this_month = month_start(timezone.localtime(now))
        last_month = add_months(this_month, -1)

        current = {"created_at__gte": this_month, "created_at__lt": now}
        previous = {"created_at__gte": last_month, "created_at__lt": this_month}

        def window(qs, field=None):
            if field is None:
                return qs.filter(**current).count(), qs.filter(**previous).count()
            return (
                _paise_sum(qs.filter(**current), field) / 100,
                _paise_sum(qs.filter(**previous), field) / 100,
            )

        pending = Order.objects.filter(status=OrderStatus.PENDING)
        return {
            "total_visitors": DashboardService._card("Total Visitors", *window(DashboardService._visitors())),
            "total_orders": DashboardService._card("Total Orders", *window(Order.objects.all())),
            "total_revenue": DashboardService._card(
                "Total Revenue", *window(DashboardService._captured(), "amount_in_paise"), money=True
            ),
            "pending_payments": DashboardService._card(
                "Pending Payments", *window(pending, "total_amount_in_paise"), money=True
            ),
        }

    @staticmethod
    def months(period=None, start_date=None, end_date=None, today=None) -> list:
        """
        [(month_start, next_month_start), ...] oldest first.
        An explicit start/end pair wins over the period.
        """
        if start_date or end_date:
            if not (start_date and end_date):
                raise BusinessLogicException(INVALID_DATE, code="invalid_date")
            first = _parse_day(start_date)
            last = _parse_day(end_date)
            if first > last:
                raise BusinessLogicException("start_date must be before end_date", code="invalid_range")
            cursor = month_start(start_of_day(first))
            stop = month_start(start_of_day(last))
        else:
            period = period or DEFAULT_PERIOD
            if period not in PERIOD_MONTHS:
                raise BusinessLogicException(INVALID_PERIOD, code="invalid_period")
            stop = month_start(timezone.localtime(today or timezone.now()))
            cursor = add_months(stop, -(PERIOD_MONTHS[period] - 1))

        windows = []
        while cursor <= stop:
            nxt = add_months(cursor, 1)
            windows.append((cursor, nxt))
            cursor = nxt
        return windows

    @staticmethod
    def _month_labels(moment) -> dict:
        return {"month": moment.strftime("%b"), "full_month": moment.strftime("%B %Y")}

    @staticmethod
    def visitors_chart(period=None, start_date=None, end_date=None) -> dict:
        rows = []
        for begin, finish in DashboardService.months(period, start_date, end_date):
            count = DashboardService._visitors().filter(created_at__gte=begin, created_at__lt=finish).count()
            rows.append({**DashboardService._month_labels(begin), "visitors": count})
        return {
            "period": period or DEFAULT_PERIOD,
            "monthly_visitors": rows,
            "total": sum(r["visitors"] for r in rows),
            "chart_data": [{"name": r["month"], "value": r["visitors"]} for r in rows],
        }

    @staticmethod
    def revenue_graph(period=None, start_date=None, end_date=None) -> dict:
        rows = []
        for begin, finish in DashboardService.months(period, start_date, end_date):
            paise = _paise_sum(
                DashboardService._captured().filter(created_at__gte=begin, created_at__lt=finish),
                "amount_in_paise",
            )
            revenue = round(paise / 100)
            rows.append({
                **DashboardService._month_labels(begin),
                "revenue": revenue,
                "formatted": format_rupees(revenue),
            })

        total = sum(r["revenue"] for r in rows)
        peak = max(rows, key=lambda r: r["revenue"])
        previous = rows[-2]["revenue"] if len(rows) > 1 else 0
        upward = rows[-1]["revenue"] >= previous
        trend = "upward" if upward else "downward"

        return {
            "period": period or DEFAULT_PERIOD,
            "revenue_trend": rows,
            "summary": {
                "total_revenue": total,
                "total_revenue_formatted": format_rupees(total),
                "peak_revenue": peak["revenue"],
                "peak_revenue_formatted": peak["formatted"],
                "peak_revenue_month": peak["month"],
                "peak_revenue_full_month": peak["full_month"],
                "trend": trend,
                "trend_description": f"Showing {trend} trend with {peak['formatted']} peak revenue",
            },
            "chart_data": [{"month": r["month"], "revenue": r["revenue"]} for r in rows],
        }

    @staticmethod
    def full_dashboard(period=None, start_date=None, end_date=None) -> dict:
        custom = bool(start_date or end_date)
        data = {
            "overview": DashboardService.overview(),
            "monthly_visitors": DashboardService.visitors_chart(period, start_date, end_date),
            "revenue_trend": DashboardService.revenue_graph(period, start_date, end_date),
            "filter_type": "custom-date-range" if custom else "period",
        }
        if custom:
            data["start_date"] = start_date
            data["end_date"] = end_date
        else:
            data["period"] = period or DEFAULT_PERIOD
        return data
