"""Custom exceptions for the layout side of hexview."""

class LayoutInputError(ValueError):
    """Raised by strict layout helpers when the input cannot be laid out as given."""
    pass

class PatternSyntaxError(ValueError):
    """Raised when a pattern override string has no usable column tokens."""
    pass
