"""
Shared Kernel

Base classes, value objects and errors shared by the booking and
payment contexts.
"""
