"""User creation and customer portal registration."""

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from apps.accounts.models import UserRole
from apps.audit.services import log_action
from apps.customers.models import Customer

from .exceptions import EmailAlreadyRegisteredError, UserRegistrationError

logger = logging.getLogger(__name__)

User = get_user_model()


@transaction.atomic
def create_role_user(
    *,
    email: str,
    password: str,
    name: str,
    role: str,
    actor: User | None = None,
) -> User:
    """
    Create a user holding a platform role.

    Used when super admins create business owners and when admins create
    staff accounts.

    Args:
        email: Login email (stored lowercased)
        password: Raw password, hashed on save
        name: Display name
        role: One of ``UserRole``
        actor: User performing the action, for the audit trail

    Returns:
        Created User instance

    Raises:
        EmailAlreadyRegisteredError: If the email is taken
    """
    email = email.strip().lower()
    if User.objects.filter(email=email).exists():
        raise EmailAlreadyRegisteredError(f"A user with email {email} already exists")

    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            name=name.strip(),
            role=role,
        )
    except IntegrityError:
        raise EmailAlreadyRegisteredError(f"A user with email {email} already exists")

    log_action(
        actor=actor,
        action='USER_CREATED',
        entity_type='User',
        entity_id=user.id,
        metadata={'email': email, 'role': role},
    )
    logger.info("Created %s user %s", role, email)
    return user


@transaction.atomic
def register_customer_account(
    *,
    email: str,
    password: str,
    shop_slug: str,
    phone: str,
    name: str = "",
) -> User:
    """
    Register a customer portal login for an existing shop customer.

    The shop must already hold an active customer with the given phone
    number who has no portal account yet.

    Raises:
        UserRegistrationError: If the customer cannot be matched
        EmailAlreadyRegisteredError: If the email is taken
    """
    try:
        customer = (
            Customer.objects
            .select_for_update()
            .select_related('shop')
            .get(shop__slug=shop_slug, phone="".join(phone.split()), is_active=True)
        )
    except Customer.DoesNotExist:
        raise UserRegistrationError("No customer with this phone number exists in that shop")

    if customer.user_id:
        raise UserRegistrationError("This customer already has a portal account")

    user = create_role_user(
        email=email,
        password=password,
        name=name or customer.full_name,
        role=UserRole.CUSTOMER,
    )
    customer.user = user
    if not customer.email:
        customer.email = user.email
    customer.save(update_fields=['user', 'email', 'updated_at'])

    logger.info("Customer %s registered portal account %s", customer.id, user.email)
    return user
