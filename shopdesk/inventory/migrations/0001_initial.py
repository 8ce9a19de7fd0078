# Generated manually

import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('catalog', '0001_initial'),
        ('locations', '0001_initial'),
        ('hrms', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='StockEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('stock_date', models.DateField(default=django.utils.timezone.localdate)),
                ('opening_stock', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=10)),
                ('stock_added', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=10)),
                ('closing_stock', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=10)),
                ('actual_stock', models.DecimalField(blank=True, decimal_places=3, max_digits=10, null=True)),
                ('operator_name', models.CharField(blank=True, max_length=200)),
                ('cash_received', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('online_received', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_entries', to=settings.AUTH_USER_MODEL)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_entries', to='catalog.product')),
                ('shift', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_entries', to='hrms.shift')),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_entries', to='locations.store')),
            ],
            options={
                'db_table': 'stocks',
                'ordering': ['-stock_date', 'product__name'],
                'unique_together': {('product', 'store', 'stock_date')},
                'indexes': [
                    models.Index(fields=['store', 'stock_date'], name='idx_stock_store_date'),
                    models.Index(fields=['product', 'stock_date'], name='idx_stock_product_date'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('requested_quantity', models.DecimalField(decimal_places=3, max_digits=10)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('request_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('response_date', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_requests', to=settings.AUTH_USER_MODEL)),
                ('fulfilling_store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='incoming_stock_requests', to='locations.store')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stock_requests', to='catalog.product')),
                ('requesting_store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='outgoing_stock_requests', to='locations.store')),
                ('responded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='responded_stock_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'stock_requests',
                'ordering': ['-request_date'],
                'indexes': [
                    models.Index(fields=['status'], name='idx_stock_request_status'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=10)),
                ('movement_type', models.CharField(choices=[('transfer', 'Transfer'), ('adjustment', 'Adjustment')], default='transfer', max_length=20)),
                ('movement_date', models.DateField(default=django.utils.timezone.localdate)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='completed', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approved_stock_movements', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_movements', to=settings.AUTH_USER_MODEL)),
                ('from_store', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='outgoing_movements', to='locations.store')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stock_movements', to='catalog.product')),
                ('stock_request', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='movements', to='inventory.stockrequest')),
                ('to_store', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='incoming_movements', to='locations.store')),
            ],
            options={
                'db_table': 'stock_movements',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Loss',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('loss_type', models.CharField(choices=[('theft', 'Theft'), ('damage', 'Damage'), ('expiry', 'Expiry'), ('spillage', 'Spillage'), ('breakage', 'Breakage'), ('other', 'Other')], max_length=20)),
                ('quantity_lost', models.DecimalField(decimal_places=3, max_digits=10)),
                ('reason', models.TextField(blank=True)),
                ('operator_name', models.CharField(blank=True, max_length=200)),
                ('loss_date', models.DateField(default=django.utils.timezone.localdate)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='recorded_losses', to=settings.AUTH_USER_MODEL)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='losses', to='catalog.product')),
                ('shift', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='losses', to='hrms.shift')),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='losses', to='locations.store')),
            ],
            options={
                'db_table': 'losses',
                'ordering': ['-loss_date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='LowStockAlert',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('current_stock', models.DecimalField(decimal_places=3, max_digits=10)),
                ('minimum_threshold', models.DecimalField(decimal_places=3, max_digits=10)),
                ('alert_date', models.DateField(default=django.utils.timezone.localdate)),
                ('is_resolved', models.BooleanField(default=False)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='low_stock_alerts', to='catalog.product')),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='low_stock_alerts', to='locations.store')),
            ],
            options={
                'db_table': 'low_stock_alerts',
                'ordering': ['is_resolved', '-alert_date'],
            },
        ),
    ]
