"""Column detection for self-describing tabular command output.

Both ``tasklist /fo csv`` and ``wmic ... /format:csv`` start with a header
naming their columns. The column order is not guaranteed, so positions are
looked up by name before any data row is read.
"""

from typing import Dict, Iterable, List, Optional

from ..exceptions import HeaderFormatError


def split_header(header: str, strip_quotes: bool = False) -> List[str]:
    """Split a header line into column names.

    Args:
        header: Raw header line
        strip_quotes: Remove every double quote before splitting

    Returns:
        Column names in the order they appear
    """
    if strip_quotes:
        header = header.replace('"', "")
    return header.strip().split(",")


def locate_columns(
    columns: List[str],
    required: Iterable[str],
    case_sensitive: bool = True,
) -> Dict[str, Optional[int]]:
    """Map each required column name to its index, or None if absent.

    When a name occurs more than once the last occurrence wins.
    """
    wanted = list(required)
    positions: Dict[str, Optional[int]] = {name: None for name in wanted}
    if case_sensitive:
        lookup = {name: name for name in wanted}
    else:
        lookup = {name.lower(): name for name in wanted}

    for index, column in enumerate(columns):
        key = column if case_sensitive else column.lower()
        if key in lookup:
            positions[lookup[key]] = index

    return positions


def require_columns(
    header: Optional[str],
    required: Iterable[str],
    command: str,
    *,
    case_sensitive: bool = True,
    strip_quotes: bool = False,
) -> Dict[str, int]:
    """Locate all ``required`` columns in ``header`` or fail.

    Args:
        header: Header line, None if the output ended before one was found
        required: Column names that must be present
        command: Command line that produced the header, for error messages
        case_sensitive: Compare names exactly
        strip_quotes: Header fields are wrapped in double quotes

    Returns:
        Mapping of column name to index

    Raises:
        HeaderFormatError: If the header is missing or lacks a column
    """
    required = list(required)
    columns = split_header(header, strip_quotes) if header is not None else []
    positions = locate_columns(columns, required, case_sensitive)
    missing = [name for name, index in positions.items() if index is None]

    if missing:
        raise HeaderFormatError(
            f"Could not find correct header information of '{command}'. "
            "Terminating Process Monitor",
            details={"command": command, "missing_columns": missing, "header": header},
        )

    return {name: index for name, index in positions.items() if index is not None}
