"""Exceptions raised by the profile toolbox."""


class InvalidArgumentError(ValueError):
    """Raised when inputs fail validation before any profile is computed.

    Covers unknown variables, a grid with fewer than two points, reserved
    column names in the data and empty variable selections.
    """
