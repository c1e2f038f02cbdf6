import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('orders', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='VolumeEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('currency', models.CharField(choices=[('RUB', 'Russian Ruble'), ('USD', 'US Dollar'), ('EUR', 'Euro'), ('KZT', 'Kazakhstani Tenge'), ('UAH', 'Ukrainian Hryvnia'), ('TON', 'Toncoin'), ('STARS', 'Stars')], max_length=5)),
                ('amount', models.DecimalField(decimal_places=8, max_digits=20)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('order', models.ForeignKey(blank=True, help_text='Completed order this volume comes from', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='volume_entries', to='orders.order')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='volume_entries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Volume Entry',
                'verbose_name_plural': 'Volume Entries',
                'ordering': ['-created_at'],
                'constraints': [models.UniqueConstraint(fields=('order', 'user'), name='unique_volume_per_order_participant')],
                'indexes': [models.Index(fields=['user', 'currency'], name='volume_user_currency_idx')],
            },
        ),
    ]
