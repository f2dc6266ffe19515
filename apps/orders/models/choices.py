from django.db import models

__all__ = ["OrderStatus", "OrderRefundStatus", "PaymentMethod", "StageType", "StageStatus"]


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending Payment"
    PAID = "PAID", "Paid"
    REFUNDED = "REFUNDED", "Refund Requested"
    FAILED = "FAILED", "Failed"
    CANCELLED = "CANCELLED", "Cancelled"


class OrderRefundStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    CANCELLED = "CANCELLED", "Cancelled"


class PaymentMethod(models.TextChoices):
    RAZORPAY = "RAZORPAY", "Razorpay"
    UPI = "UPI", "UPI"
    CARD = "CARD", "Card"
    NETBANKING = "NETBANKING", "Net Banking"
    COD = "COD", "Cash on Delivery"


class StageType(models.TextChoices):
    ORDER_CONFIRMED = "ORDER_CONFIRMED", "Order Confirmed"
    NURSERY_ALLOCATION = "NURSERY_ALLOCATION", "Nursery Allocation"
    GROWTH_PHASE = "GROWTH_PHASE", "Growth Phase"
    READY_FOR_DISPATCH = "READY_FOR_DISPATCH", "Ready for Dispatch"
    DELIVERED = "DELIVERED", "Delivered"


class StageStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    IN_PROGRESS = "IN_PROGRESS", "In Progress"
    COMPLETED = "COMPLETED", "Completed"
