"""Error taxonomy for OOM report extraction.

Every error carries the pipeline phase it was raised in so a format mismatch can be
traced back to the step that expected something the log did not contain.
"""

from __future__ import annotations


class OomReportError(ValueError):
    """Base class for all extraction failures."""

    phase = "report"

    def __init__(self, message: str, *, phase: str | None = None) -> None:
        if phase is not None:
            self.phase = phase
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.phase}] {super().__str__()}"


class MarkerNotFound(OomReportError):
    """No OOM invocation anywhere in the document."""

    phase = "locate"


class SegmentMatchFailed(OomReportError):
    """An invocation exists but no complete report follows it."""

    phase = "extract"


class FieldNotFound(OomReportError):
    """A metric figure is absent from the cleaned block."""

    phase = "metrics"

    def __init__(self, field: str, pattern: str) -> None:
        self.field = field
        self.pattern = pattern
        super().__init__(f"No match for {field} (expected text like {pattern!r})")


class MandatoryFieldMissing(OomReportError):
    """A metric required for the summary report is absent."""

    phase = "metrics"

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Mandatory field {field} not found in OOM report")


class ColumnNotFound(OomReportError):
    """The process table header lacks a column every row offset depends on."""

    phase = "process_table"


class RowFieldCountMismatch(OomReportError):
    """A process table row does not line up with the header."""

    phase = "process_table"

    def __init__(self, line: str, *, expected: int, actual: int) -> None:
        self.line = line
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Process row has {actual} fields, header has {expected}: {line.strip()!r}"
        )


class NumericParseFailure(OomReportError):
    """A cell expected to hold an integer does not."""

    phase = "process_table"

    def __init__(self, column: str, value: str) -> None:
        self.column = column
        self.value = value
        super().__init__(f"Column {column!r} holds non-integer value {value!r}")
