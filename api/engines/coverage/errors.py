"""
Validation errors raised by the coverage engine.

All of these are caller mistakes (bad geometry or an empty request), never
transient failures, so nothing in the engine retries or swallows them.
"""


class CoverageError(ValueError):
    """Base class for tile coverage validation failures"""


class InvalidDimension(CoverageError):
    """A surface, room or tile side is zero, negative or not a finite number"""

    def __init__(self, field: str, value, message: str = None):
        self.field = field
        self.value = value
        super().__init__(message or f"{field} must be a finite number greater than 0 (got {value})")


class MissingRoomDimensions(CoverageError):
    """Wastage was requested without room dimensions"""

    def __init__(self, message: str = "Room dimensions are required"):
        super().__init__(message)


class EmptyTileList(CoverageError):
    """Wastage was requested with no placed tiles"""

    def __init__(self, message: str = "At least one placed tile is required"):
        super().__init__(message)


class UnknownUnit(CoverageError):
    """A length unit outside in/ft/m/cm/mm (or their catalog spellings)"""

    def __init__(self, unit):
        self.unit = unit
        super().__init__(f"Unknown length unit {unit!r}")


class InvalidAmount(CoverageError):
    """A price or wastage percentage outside its range or not a finite number"""

    def __init__(self, field: str, value, message: str = None):
        self.field = field
        self.value = value
        super().__init__(message or f"{field} must be a finite number of at least 0 (got {value})")
