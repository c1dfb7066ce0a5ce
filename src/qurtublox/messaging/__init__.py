"""Admin-to-customer messages and recipient groups."""
