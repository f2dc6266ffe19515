import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _stage_status():
    return models.CharField(
        choices=[('PENDING', 'Pending'), ('IN_PROGRESS', 'In Progress'), ('COMPLETED', 'Completed')],
        default='PENDING', max_length=20,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('order_id', models.CharField(editable=False, max_length=20, unique=True)),
                ('product_id', models.PositiveIntegerField(blank=True, null=True)),
                ('product_name', models.CharField(blank=True, default='', max_length=255)),
                ('delivery_date', models.DateField()),
                ('delivery_location', models.CharField(blank=True, default='', max_length=255)),
                ('quantity', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('price_per_unit', models.DecimalField(decimal_places=2, max_digits=10)),
                ('total_amount_in_paise', models.PositiveBigIntegerField()),
                ('full_name', models.CharField(max_length=255)),
                ('email', models.EmailField(max_length=254)),
                ('phone', models.CharField(max_length=15)),
                ('whatsapp', models.CharField(blank=True, default='', max_length=15)),
                ('delivery_address', models.TextField()),
                ('state', models.CharField(max_length=100)),
                ('district', models.CharField(max_length=100)),
                ('pincode', models.CharField(max_length=10)),
                ('area_name', models.CharField(max_length=255)),
                ('payment_method', models.CharField(choices=[('RAZORPAY', 'Razorpay'), ('UPI', 'UPI'), ('CARD', 'Card'), ('NETBANKING', 'Net Banking'), ('COD', 'Cash on Delivery')], default='RAZORPAY', max_length=20)),
                ('status', models.CharField(choices=[('PENDING', 'Pending Payment'), ('PAID', 'Paid'), ('REFUNDED', 'Refund Requested'), ('FAILED', 'Failed'), ('CANCELLED', 'Cancelled')], db_index=True, default='PENDING', max_length=20)),
                ('refund_request_date', models.DateTimeField(blank=True, null=True)),
                ('refund_status', models.CharField(blank=True, choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('CANCELLED', 'Cancelled')], db_index=True, max_length=20, null=True)),
                ('is_bulk_upload', models.BooleanField(default=False)),
                ('terms_accepted', models.BooleanField(default=False)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status', 'created_at'], name='order_status_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='ProgressTracker',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('order_confirmed_status', _stage_status()),
                ('order_confirmed_start', models.DateTimeField(blank=True, null=True)),
                ('order_confirmed_end', models.DateTimeField(blank=True, null=True)),
                ('nursery_allocation_status', _stage_status()),
                ('nursery_allocation_start', models.DateTimeField(blank=True, null=True)),
                ('nursery_allocation_end', models.DateTimeField(blank=True, null=True)),
                ('growth_phase_status', _stage_status()),
                ('growth_phase_start', models.DateTimeField(blank=True, null=True)),
                ('growth_phase_end', models.DateTimeField(blank=True, null=True)),
                ('ready_for_dispatch_status', _stage_status()),
                ('ready_for_dispatch_start', models.DateTimeField(blank=True, null=True)),
                ('ready_for_dispatch_end', models.DateTimeField(blank=True, null=True)),
                ('delivered_status', _stage_status()),
                ('delivered_start', models.DateTimeField(blank=True, null=True)),
                ('delivered_end', models.DateTimeField(blank=True, null=True)),
                ('current_stage', models.CharField(blank=True, choices=[('ORDER_CONFIRMED', 'Order Confirmed'), ('NURSERY_ALLOCATION', 'Nursery Allocation'), ('GROWTH_PHASE', 'Growth Phase'), ('READY_FOR_DISPATCH', 'Ready for Dispatch'), ('DELIVERED', 'Delivered')], db_index=True, max_length=30, null=True)),
                ('progress_percentage', models.PositiveSmallIntegerField(default=0)),
                ('order', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='progress_tracker', to='orders.order')),
            ],
            options={
                'abstract': False,
            },
        ),
    ]
