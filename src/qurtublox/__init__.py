"""QurtubloX Store: points-based storefront and admin API."""
