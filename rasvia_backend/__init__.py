"""
Rasvia backend: pont entre Stripe Checkout et l'application mobile.
"""
