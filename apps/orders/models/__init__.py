"""
Orders app models, split per concern:

    from apps.orders.models import Order, ProgressTracker, OrderStatus
"""

from .choices import *        # OrderStatus, OrderRefundStatus, PaymentMethod, StageType, StageStatus
from .order import *          # Order
from .tracker import *        # ProgressTracker, STAGE_FIELDS, STAGE_PROGRESS
