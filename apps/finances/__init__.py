"""Finances app package.

Payment transactions and the card payment flow. Settlement goes through
a payment processor; the simulated processor is the default.
"""
