from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


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
                ('code', models.CharField(editable=False, max_length=8, unique=True, validators=[django.core.validators.RegexValidator(message='Order code must be 8 uppercase letters or digits', regex='^[A-Z0-9]{8}$')])),
                ('type', models.CharField(choices=[('gift', 'NFT Gift'), ('username', 'NFT Username'), ('number', 'NFT Number')], max_length=10)),
                ('payment_method', models.CharField(choices=[('wallet', 'Crypto Wallet'), ('card', 'Bank Card'), ('stars', 'Stars')], max_length=10)),
                ('amount', models.DecimalField(decimal_places=8, max_digits=20, validators=[django.core.validators.MinValueValidator(Decimal('0.00000001'))])),
                ('currency', models.CharField(choices=[('RUB', 'Russian Ruble'), ('USD', 'US Dollar'), ('EUR', 'Euro'), ('KZT', 'Kazakhstani Tenge'), ('UAH', 'Ukrainian Hryvnia'), ('TON', 'Toncoin'), ('STARS', 'Stars')], max_length=5)),
                ('description', models.TextField(max_length=1000)),
                ('seller_requisites', models.CharField(help_text='Where the buyer sends payment; shape depends on payment method', max_length=255)),
                ('status', models.CharField(choices=[('active', 'Active'), ('paid', 'Paid'), ('transferred', 'Transferred'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], db_index=True, default='active', max_length=12)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('buyer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='purchases', to=settings.AUTH_USER_MODEL)),
                ('seller', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sales', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Order',
                'verbose_name_plural': 'Orders',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['status', '-created_at'], name='order_status_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='OrderParticipant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(choices=[('seller', 'Seller'), ('buyer', 'Buyer')], max_length=10)),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='participants', to='orders.order')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='participations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Order Participant',
                'verbose_name_plural': 'Order Participants',
                'ordering': ['joined_at'],
                'constraints': [models.UniqueConstraint(fields=('order', 'user'), name='unique_order_participant')],
            },
        ),
        migrations.CreateModel(
            name='OrderStateLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('from_status', models.CharField(max_length=12)),
                ('to_status', models.CharField(max_length=12)),
                ('reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('changed_by', models.ForeignKey(blank=True, help_text='User who triggered the change', null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='state_logs', to='orders.order')),
            ],
            options={
                'verbose_name': 'Order State Log',
                'verbose_name_plural': 'Order State Logs',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['order', '-created_at'], name='orderlog_order_created_idx')],
            },
        ),
    ]
