"""Per-shop interest and late fee policy."""

import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.purchases.models import InterestType, ShopPolicy
from apps.tenants.models import Shop

from .exceptions import InvalidPolicyError

logger = logging.getLogger(__name__)

POLICY_FIELDS = (
    'interest_type', 'interest_rate', 'grace_days', 'max_tenor_days',
    'late_fee_fixed', 'late_fee_rate',
)


def default_policy(shop: Shop) -> ShopPolicy:
    """Unsaved policy carrying the platform defaults."""
    defaults = settings.DEFAULT_SHOP_POLICY
    return ShopPolicy(
        shop=shop,
        interest_type=defaults['interest_type'],
        interest_rate=Decimal(defaults['interest_rate']),
        grace_days=defaults['grace_days'],
        max_tenor_days=defaults['max_tenor_days'],
        late_fee_fixed=defaults['late_fee_fixed'],
        late_fee_rate=defaults['late_fee_rate'],
    )


def get_shop_policy(shop: Shop) -> ShopPolicy:
    """Stored policy of the shop, or the defaults when none is saved."""
    policy = ShopPolicy.objects.filter(shop=shop).first()
    return policy if policy is not None else default_policy(shop)


def _snapshot(policy: ShopPolicy) -> dict:
    return {field: getattr(policy, field) for field in POLICY_FIELDS}


def validate_policy_values(values: dict) -> None:
    """
    Check policy ranges.

    Raises:
        InvalidPolicyError: If any value is outside its allowed range
    """
    if values['interest_type'] not in InterestType.values:
        raise InvalidPolicyError("Interest type must be FLAT or MONTHLY")
    if not Decimal('0') <= Decimal(values['interest_rate']) <= Decimal('100'):
        raise InvalidPolicyError("Interest rate must be between 0 and 100")
    if not 0 <= values['grace_days'] <= 60:
        raise InvalidPolicyError("Grace days must be between 0 and 60")
    if not 1 <= values['max_tenor_days'] <= 365:
        raise InvalidPolicyError("Maximum tenor must be between 1 and 365 days")
    for field in ('late_fee_fixed', 'late_fee_rate'):
        if values[field] is not None and Decimal(values[field]) < 0:
            raise InvalidPolicyError(f"{field.replace('_', ' ').capitalize()} cannot be negative")


@transaction.atomic
def upsert_shop_policy(*, shop: Shop, actor: User, **values) -> ShopPolicy:
    """
    Create or update the shop's policy.

    Fields omitted from ``values`` keep their current (or default) value.

    Args:
        shop: Shop whose policy changes
        actor: User performing the change
        **values: Any of interest_type, interest_rate, grace_days,
            max_tenor_days, late_fee_fixed, late_fee_rate

    Returns:
        Saved ShopPolicy

    Raises:
        InvalidPolicyError: If a value is out of range
    """
    policy = ShopPolicy.objects.select_for_update().filter(shop=shop).first()
    created = policy is None
    if created:
        policy = default_policy(shop)

    previous = None if created else _snapshot(policy)
    merged = _snapshot(policy)
    merged.update({key: value for key, value in values.items() if key in POLICY_FIELDS})
    validate_policy_values(merged)

    for field, value in merged.items():
        setattr(policy, field, value)
    policy.save()

    log_action(
        actor=actor,
        action='SHOP_POLICY_UPDATED',
        entity_type='ShopPolicy',
        entity_id=policy.id,
        metadata={'shop': shop.slug, 'previous': previous, 'new': _snapshot(policy)},
    )
    logger.info("Policy for shop %s %s", shop.slug, 'created' if created else 'updated')
    return policy
