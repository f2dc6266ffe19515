import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Location',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('state', models.CharField(max_length=100, validators=[django.core.validators.MinLengthValidator(1)])),
                ('district', models.CharField(max_length=100, validators=[django.core.validators.MinLengthValidator(1)])),
                ('pin_code', models.CharField(max_length=10, validators=[django.core.validators.MinLengthValidator(3)])),
                ('min_quantity', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('max_quantity', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('price_per_unit', models.DecimalField(decimal_places=2, max_digits=10)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
            ],
            options={
                'ordering': ['-created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('state', 'district'), name='unique_location_state_district'),
                    models.CheckConstraint(condition=models.Q(('max_quantity__gte', models.F('min_quantity'))), name='location_max_gte_min'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Pincode',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('pincode', models.CharField(db_index=True, max_length=10)),
                ('office_name', models.CharField(max_length=255)),
                ('district', models.CharField(max_length=100)),
                ('state', models.CharField(max_length=100)),
            ],
            options={
                'indexes': [models.Index(fields=['state', 'district'], name='pincode_state_district_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('pincode', 'office_name'), name='unique_pincode_office'),
                ],
            },
        ),
    ]
