"""
Create or update a shop admin from environment variables.

Usage:
    SHOPADMIN_EMAIL=... SHOPADMIN_PASSWORD=... python manage.py seed_shopadmin

SHOPADMIN_NAME names the user. SHOPADMIN_SHOP_SLUG picks the shop; without
it the first active shop is used.
"""

from decouple import config
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.accounts.models import User, UserRole
from apps.tenants.models import Shop, StaffMember, StaffRole


class Command(BaseCommand):
    help = 'Upsert a shop admin user and their shop membership'

    @transaction.atomic
    def handle(self, *args, **options):
        email = config('SHOPADMIN_EMAIL', default='')
        password = config('SHOPADMIN_PASSWORD', default='')
        name = config('SHOPADMIN_NAME', default='Shop Admin')
        shop_slug = config('SHOPADMIN_SHOP_SLUG', default='')

        if not email or not password:
            raise CommandError('SHOPADMIN_EMAIL and SHOPADMIN_PASSWORD must be set')

        email = email.strip().lower()
        user, created = User.objects.get_or_create(
            email=email,
            defaults={'name': name, 'role': UserRole.SHOP_ADMIN},
        )
        user.name = name
        user.role = UserRole.SHOP_ADMIN
        user.set_password(password)
        user.save()
        self.stdout.write(f"{'Created' if created else 'Updated'} shop admin {email}")

        if shop_slug:
            shop = Shop.objects.filter(slug=shop_slug).first()
            if shop is None:
                raise CommandError(f'Shop with slug "{shop_slug}" not found. Create the shop first.')
        else:
            shop = Shop.objects.filter(is_active=True).order_by('created_at').first()
            if shop is None:
                self.stdout.write(self.style.WARNING(
                    'No active shops found. Create a shop first, then run this command again.'
                ))
                return

        StaffMember.objects.update_or_create(
            user=user,
            shop=shop,
            defaults={'role': StaffRole.SHOP_ADMIN, 'is_active': True},
        )
        self.stdout.write(self.style.SUCCESS(f'{email} is shop admin of "{shop.name}".'))
