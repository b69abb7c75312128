"""
Error types raised by the unit-economics engine.
"""


class InvalidInputError(ValueError):
    """Raised when an input value is negative, zero where it must be positive, or out of range."""


class UnknownPresetError(ValueError):
    """Raised when a pricing preset name is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Unknown pricing preset: {name}")
        self.name = name
