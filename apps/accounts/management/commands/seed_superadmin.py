"""
Create the platform super admin from environment variables.

Usage:
    SUPERADMIN_EMAIL=... SUPERADMIN_PASSWORD=... python manage.py seed_superadmin

SUPERADMIN_NAME is optional. Nothing happens when the user already exists.
"""

from decouple import config
from django.core.management.base import BaseCommand, CommandError

from apps.accounts.models import User, UserRole


class Command(BaseCommand):
    help = 'Create the super admin user from SUPERADMIN_* environment variables'

    def handle(self, *args, **options):
        email = config('SUPERADMIN_EMAIL', default='')
        password = config('SUPERADMIN_PASSWORD', default='')
        name = config('SUPERADMIN_NAME', default='Super Admin')

        if not email or not password:
            raise CommandError('SUPERADMIN_EMAIL and SUPERADMIN_PASSWORD must be set')

        email = email.strip().lower()
        if User.objects.filter(email=email).exists():
            self.stdout.write(self.style.WARNING(f'User {email} already exists, nothing to do.'))
            return

        User.objects.create_superuser(
            email=email,
            password=password,
            name=name,
            role=UserRole.SUPER_ADMIN,
        )
        self.stdout.write(self.style.SUCCESS(f'Super admin {email} created.'))
