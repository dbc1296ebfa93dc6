"""Plain text rendering of issues and sprints.

Rows are lists of cells. Every cell except the last one of a row is padded
to the width of its column, where a column spans the consecutive rows that
have a cell in that position. Cells are separated by a single space.
"""

from collections.abc import Iterable, Sequence

from .models import Issue, Sprint, sort_issues

PADDING = 1


def _column_widths(rows: Sequence[Sequence[str]], padding: int) -> list[list[int]]:
    widths: list[list[int]] = [[] for _ in rows]

    def layout(start: int, end: int, column: int) -> None:
        line = start
        while line < end:
            if column >= len(rows[line]) - 1:
                line += 1
                continue

            block_end = line
            while block_end < end and column < len(rows[block_end]) - 1:
                block_end += 1

            width = max(len(rows[i][column]) for i in range(line, block_end))
            for i in range(line, block_end):
                widths[i].append(width + padding)

            layout(line, block_end, column + 1)
            line = block_end

    layout(0, len(rows), 0)
    return widths


def align_rows(rows: Sequence[Sequence[str]], padding: int = PADDING) -> str:
    """
    Render rows as aligned text, one line per row.

    Args:
        rows: Cells of each row; an empty row renders as an empty line
        padding: Spaces added after the widest cell of a column

    Returns:
        The rendered text, every line terminated by a newline
    """
    widths = _column_widths(rows, padding)
    lines = []
    for row, row_widths in zip(rows, widths, strict=True):
        if not row:
            lines.append("")
            continue
        padded = "".join(cell.ljust(width) for cell, width in zip(row, row_widths))
        lines.append(padded + row[-1])
    return "".join(f"{line}\n" for line in lines)


def format_issues(issues: list[Issue]) -> str:
    """``KEY - Status - Summary`` rows sorted by workflow rank."""
    rows = [
        [issue.key, "-", issue.status.name, "-", issue.summary]
        for issue in sort_issues(issues)
    ]
    return align_rows(rows)


def format_sprint_issues(issues: list[Issue], include_done: bool = False) -> str:
    """``Status - KEY - Summary`` rows; done issues only with ``include_done``."""
    return align_rows(
        [
            [issue.status.name, "-", issue.key, "-", issue.summary]
            for issue in sort_issues(issues)
            if include_done or not issue.status.is_done
        ]
    )


def format_end_date(sprint: Sprint) -> str:
    if sprint.end_date is None:
        return "N/A"
    local = sprint.end_date.astimezone()
    return f"{local.year}/{local.month}/{local.day}"


def format_sprints(sprints: Iterable[Sprint]) -> str:
    """``ID - end date - Name`` rows in board order."""
    rows = [
        [str(sprint.id), "-", format_end_date(sprint), "-", sprint.name]
        for sprint in sprints
    ]
    return align_rows(rows)
