from django.urls import path
from .views import VerifyPaymentView, RazorpayWebhookView
from .views_admin import (
    PaymentCardsView, TransactionListView, RefundCardsView, RefundRequestListView,
    CancelledRefundListView, RefundExportView, ApproveRefundView, CancelRefundView,
)

urlpatterns = [
    path('verify/', VerifyPaymentView.as_view(), name='payment-verify'),
    path('webhook/', RazorpayWebhookView.as_view(), name='payment-webhook'),

    path('admin/cards/', PaymentCardsView.as_view(), name='admin-payment-cards'),
    path('admin/transactions/page/<int:page>/', TransactionListView.as_view(), name='admin-transactions'),
    path('admin/refunds/cards/', RefundCardsView.as_view(), name='admin-refund-cards'),
    path('admin/refunds/page/<int:page>/', RefundRequestListView.as_view(), name='admin-refund-requests'),
    path('admin/refunds/cancelled/page/<int:page>/', CancelledRefundListView.as_view(), name='admin-refunds-cancelled'),
    path('admin/refunds/export/', RefundExportView.as_view(), name='admin-refund-export'),
    path('admin/refunds/<int:order_pk>/approve/', ApproveRefundView.as_view(), name='admin-refund-approve'),
    path('admin/refunds/<int:order_pk>/cancel/', CancelRefundView.as_view(), name='admin-refund-cancel'),
]
