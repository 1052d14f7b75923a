# Generated manually for the commissions app

import uuid
from decimal import Decimal
import django.core.validators
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

BONUS_TRIGGERS = [
    ('COLLECTION', 'Payment Collection'),
    ('SALE', 'Sale Made'),
    ('CUSTOMER_CREATED', 'Customer Created'),
    ('FULL_PAYMENT', 'Full Payment'),
    ('ON_TIME_COLLECTION', 'On-time Collection'),
    ('RECOVERY', 'Debt Recovery'),
    ('TARGET_HIT', 'Target Achieved'),
    ('SHOP_PERFORMANCE', 'Shop Performance'),
    ('ZERO_DEFAULT', 'Zero Default'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenants', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Commission',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('period_start', models.DateField()),
                ('period_end', models.DateField()),
                ('base_amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('rate', models.DecimalField(decimal_places=4, max_digits=6)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('PAID', 'Paid')], db_index=True, default='PENDING', max_length=10)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('payment_reference', models.CharField(blank=True, max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approved_commissions', to=settings.AUTH_USER_MODEL)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='commissions', to='tenants.business')),
                ('paid_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='paid_commissions', to=settings.AUTH_USER_MODEL)),
                ('shop', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='commissions', to='tenants.shop')),
                ('staff_member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='commissions', to='tenants.staffmember')),
            ],
            options={
                'db_table': 'commissions',
                'ordering': ['-created_at'],
                'unique_together': {('staff_member', 'period_start', 'period_end')},
            },
        ),
        migrations.CreateModel(
            name='BonusRule',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('target_role', models.CharField(max_length=20)),
                ('trigger_type', models.CharField(choices=BONUS_TRIGGERS, max_length=20)),
                ('calculation_type', models.CharField(choices=[('FIXED', 'Fixed'), ('PERCENTAGE', 'Percentage')], default='PERCENTAGE', max_length=10)),
                ('value', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('minimum_threshold', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('maximum_cap', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('target_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('tiers', models.JSONField(blank=True, help_text='List of {"min", "max", "value"}; max 0 means open ended', null=True)),
                ('period', models.CharField(choices=[('DAILY', 'Daily'), ('WEEKLY', 'Weekly'), ('MONTHLY', 'Monthly'), ('QUARTERLY', 'Quarterly'), ('YEARLY', 'Yearly'), ('ONE_TIME', 'One Time')], default='MONTHLY', max_length=10)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bonus_rules', to='tenants.business')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('shop', models.ForeignKey(blank=True, help_text='Leave empty to apply to every shop', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='bonus_rules', to='tenants.shop')),
            ],
            options={
                'db_table': 'bonus_rules',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='BonusRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('trigger_type', models.CharField(choices=BONUS_TRIGGERS, max_length=20)),
                ('source_id', models.CharField(blank=True, max_length=64)),
                ('source_ref', models.CharField(blank=True, max_length=200)),
                ('base_amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('rate', models.DecimalField(blank=True, decimal_places=4, max_digits=8, null=True)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('period_start', models.DateTimeField(blank=True, null=True)),
                ('period_end', models.DateTimeField(blank=True, null=True)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('PAID', 'Paid'), ('REJECTED', 'Rejected')], db_index=True, default='PENDING', max_length=10)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('payment_reference', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bonus_records', to='tenants.business')),
                ('paid_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('rule', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='records', to='commissions.bonusrule')),
                ('shop', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bonus_records', to='tenants.shop')),
                ('staff_member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bonus_records', to='tenants.staffmember')),
            ],
            options={
                'db_table': 'bonus_records',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='bonusrule',
            index=models.Index(fields=['business', 'trigger_type', 'is_active'], name='bonus_rules_busines_93c400_idx'),
        ),
        migrations.AddIndex(
            model_name='bonusrecord',
            index=models.Index(fields=['rule', 'staff_member', 'period_start', 'period_end'], name='bonus_recor_rule_id_08457e_idx'),
        ),
        migrations.AddIndex(
            model_name='bonusrecord',
            index=models.Index(fields=['business', 'status'], name='bonus_recor_busines_71fa57_idx'),
        ),
    ]
