"""Template errors.

All errors raised while parsing or rendering a template derive from
TemplateError, which is a ValueError so callers treating bad input
generically keep working.
"""


class TemplateError(ValueError):
    """Base class for template parse and render failures."""

    def __init__(
        self,
        message: str,
        name: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.message = message
        self.name = name
        self.line = line
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line}, column {self.column})"


class ParseError(TemplateError):
    """Raised when template text contains malformed directives.

    Attributes:
        name: Offending tag name (or the raw tag text when it has no valid name)
        offset: Character offset of the offending tag in the source text
        line: 1-based line number
        column: 1-based column number
    """

    def __init__(
        self,
        message: str,
        name: str | None = None,
        offset: int = 0,
        line: int = 1,
        column: int = 1,
    ) -> None:
        self.offset = offset
        super().__init__(message, name=name, line=line, column=column)


class MissingVariableError(TemplateError):
    """Raised in strict mode when a name does not resolve in the context."""

    def __init__(
        self,
        name: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(
            f"Missing variable: {name}",
            name=name,
            line=line,
            column=column,
        )


class TypeMismatchError(TemplateError):
    """Raised when a value has the wrong kind for the directive using it.

    Attributes:
        expected: Kind the directive needs ("scalar", "sequence", "mapping")
        actual: Kind actually found in the context
    """

    def __init__(
        self,
        name: str,
        expected: str,
        actual: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Type mismatch for '{name}': expected {expected}, got {actual}",
            name=name,
            line=line,
            column=column,
        )
