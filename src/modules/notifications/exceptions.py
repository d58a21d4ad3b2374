"""Notification domain exceptions."""


class DeliveryFailure(Exception):
    """The mail backend could not deliver a message."""
