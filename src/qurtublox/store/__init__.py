"""Store module for the points shop.

Provides the product catalog, order records and checkout.
"""
