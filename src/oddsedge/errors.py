"""Error taxonomy for the odds engine.

Expected absence (no quotes for a side, no pins, empty averages) is never an
error; those cases return ``None`` or empty collections.
"""


class OddsEngineError(Exception):
    """Base class for all engine errors."""


class DomainError(OddsEngineError, ValueError):
    """Malformed numeric input, e.g. an American price of 0 or a probability outside (0, 1)."""


class ComputationError(OddsEngineError, ArithmeticError):
    """A numeric method failed to converge or produced a non-finite result."""


class InvariantError(OddsEngineError):
    """A caller broke a data contract, e.g. a duplicate id within one snapshot."""
