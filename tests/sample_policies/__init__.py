"""Policy modules used by the wiring tests."""
