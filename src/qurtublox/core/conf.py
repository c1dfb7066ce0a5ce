"""Store configuration."""

from django.conf import settings


DEFAULT_PRODUCTS = [
    {
        "sku": "QP-SHIRT-001",
        "name": "QurtubloX T-Shirt",
        "price": 25,
        "desc": "Official QurtubloX merchandise - premium cotton t-shirt",
        "status": "in_stock",
    },
    {
        "sku": "QP-HOODIE-001",
        "name": "QurtubloX Hoodie",
        "price": 45,
        "desc": "Warm and comfortable hoodie with QurtubloX logo",
        "status": "in_stock",
    },
    {
        "sku": "QP-CAP-001",
        "name": "QurtubloX Cap",
        "price": 15,
        "desc": "Stylish cap representing the movement",
        "status": "coming_soon",
    },
]


def get_config():
    """Get store configuration from settings."""
    defaults = {
        # Branding
        'STORE_NAME': 'QurtubloX Store',

        # Points economy
        'DEFAULT_POINTS': 100,
        'UNLIMITED_POINTS': 999999,  # balances at or above this are never debited

        # Catalog
        'DEFAULT_PRODUCT_IMAGE': '/placeholder.svg?height=400&width=400',
        'DEFAULT_PRODUCTS': DEFAULT_PRODUCTS,
    }

    user_config = getattr(settings, 'QURTUBLOX', {})
    return {**defaults, **user_config}


def get_setting(name, default=None):
    """Get a specific store setting."""
    config = get_config()
    return config.get(name, default)


def get_default_points():
    """Starting balance for new accounts."""
    return get_config().get('DEFAULT_POINTS', 100)


def get_unlimited_points():
    """Balance treated as effectively unlimited."""
    return get_config().get('UNLIMITED_POINTS', 999999)


def get_default_products():
    """Products shown when the catalog is empty."""
    return [dict(p) for p in get_config().get('DEFAULT_PRODUCTS', [])]
