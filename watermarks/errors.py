"""Errors raised while parsing watermark templates."""


class ParseError(ValueError):
    """Raised when a watermark template cannot be parsed."""

    pass


class MalformedSyntax(ParseError):
    """Raised for undecodable input, invalid JSON or illegal block nesting."""

    pass


class EmptyTemplate(ParseError):
    """Raised when a template parses but contains nothing to lay out."""

    pass


class MissingRequiredField(ParseError):
    """Raised when a field the layout cannot do without is absent or unusable."""

    pass
