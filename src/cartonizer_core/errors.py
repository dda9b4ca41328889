class InvalidInputError(ValueError):
    """Malformed packing request (contract violation, not infeasibility)."""


class InvalidDimensionError(InvalidInputError):
    """An item or box has a non-positive or non-finite dimension."""


class InvalidTransitionError(ValueError):
    """Packing status transition that the state machine does not allow."""
