# Generated manually for the tenants app

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Business',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('slug', models.SlugField(max_length=100, unique=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='owned_businesses', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'businesses',
                'verbose_name_plural': 'businesses',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Shop',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('slug', models.SlugField(max_length=100, unique=True)),
                ('address', models.CharField(blank=True, max_length=255)),
                ('country', models.CharField(default='Ghana', max_length=100)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shops', to='tenants.business')),
            ],
            options={
                'db_table': 'shops',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='StaffMember',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('role', models.CharField(choices=[('SHOP_ADMIN', 'Shop Admin'), ('SALES_STAFF', 'Sales Staff'), ('DEBT_COLLECTOR', 'Debt Collector'), ('ACCOUNTANT', 'Accountant')], max_length=20)),
                ('is_active', models.BooleanField(default=True)),
                ('can_confirm_payments', models.BooleanField(default=False)),
                ('can_view_profit_margins', models.BooleanField(default=False)),
                ('can_approve_commissions', models.BooleanField(default=False)),
                ('can_pay_commissions', models.BooleanField(default=False)),
                ('can_manage_budgets', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('shop', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='staff', to='tenants.shop')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'staff_members',
                'ordering': ['created_at'],
            },
        ),
        # Indexes for Business
        migrations.AddIndex(
            model_name='business',
            index=models.Index(fields=['slug'], name='businesses_slug_279d6a_idx'),
        ),
        migrations.AddIndex(
            model_name='business',
            index=models.Index(fields=['is_active'], name='businesses_is_acti_8eca54_idx'),
        ),
        # Indexes for Shop
        migrations.AddIndex(
            model_name='shop',
            index=models.Index(fields=['business', 'is_active'], name='shops_busines_95eff7_idx'),
        ),
        migrations.AddIndex(
            model_name='shop',
            index=models.Index(fields=['slug'], name='shops_slug_ff1e17_idx'),
        ),
        # Indexes and uniqueness for StaffMember
        migrations.AddIndex(
            model_name='staffmember',
            index=models.Index(fields=['shop', 'role', 'is_active'], name='staff_membe_shop_id_f0233c_idx'),
        ),
        migrations.AddIndex(
            model_name='staffmember',
            index=models.Index(fields=['user', 'role'], name='staff_membe_user_id_f68e47_idx'),
        ),
        migrations.AlterUniqueTogether(
            name='staffmember',
            unique_together={('user', 'shop')},
        ),
    ]
