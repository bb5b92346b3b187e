"""Billing backend for a courier and parcel-locker service."""

__version__ = "0.1.0"
