"""Slug generation shared by businesses and shops."""

from django.utils.text import slugify


def unique_slug(model, value: str, *, max_length: int = 100) -> str:
    """
    Return a slug derived from ``value`` that no row of ``model`` uses yet.

    Collisions get a numeric suffix: ``acme``, ``acme-2``, ``acme-3``...
    """
    base = slugify(value)[:max_length - 6] or 'tenant'
    candidate = base
    suffix = 2
    while model.objects.filter(slug=candidate).exists():
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate
