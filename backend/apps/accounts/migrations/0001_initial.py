import django.utils.timezone
from django.db import migrations, models

import apps.accounts.managers


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('external_id', models.CharField(db_index=True, max_length=64, unique=True)),
                ('username', models.CharField(help_text='Display name, set on first resolution', max_length=150)),
                ('wallet', models.CharField(blank=True, help_text='TON wallet address', max_length=128, null=True)),
                ('card_number', models.CharField(blank=True, max_length=32, null=True)),
                ('card_bank', models.CharField(blank=True, max_length=100, null=True)),
                ('card_currency', models.CharField(blank=True, choices=[('RUB', 'Russian Ruble'), ('USD', 'US Dollar'), ('EUR', 'Euro'), ('KZT', 'Kazakhstani Tenge'), ('UAH', 'Ukrainian Hryvnia')], max_length=5, null=True)),
                ('messaging_handle', models.CharField(blank=True, help_text='Messenger handle used to receive stars', max_length=64, null=True)),
                ('completed_deals', models.PositiveIntegerField(default=0)),
                ('is_active', models.BooleanField(default=True)),
                ('is_staff', models.BooleanField(default=False, help_text='May confirm transitions on behalf of participants')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'ordering': ['-created_at'],
            },
            managers=[
                ('objects', apps.accounts.managers.UserManager()),
            ],
        ),
    ]
