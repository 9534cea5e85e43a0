"""Exceptions shared by the service layer."""


class AccessDenied(ValueError):
    """The caller may not act on the record; the API answers 403.

    State problems (a shipment that is not open, a bid that is no longer
    pending) stay plain ``ValueError`` and answer 400.
    """
