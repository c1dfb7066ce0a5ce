"""Customer accounts and point balances."""
