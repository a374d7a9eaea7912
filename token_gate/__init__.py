"""Verification and revocation gate for short-lived access tokens."""
