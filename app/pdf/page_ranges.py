from collections.abc import Sequence


def parse_page_ranges(expression: str | None) -> list[int] | None:
    """Parse a page range expression such as ``"1-5, 8, 11-13"``.

    Returns None for an empty or blank expression (meaning "all pages"),
    otherwise the sorted, de-duplicated page numbers. Reversed ranges and
    non-numeric parts are ignored, so the result may be an empty list.
    """
    if expression is None or not expression.strip():
        return None

    pages: set[int] = set()
    for part in expression.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_raw, _, end_raw = part.partition("-")
            try:
                start, end = int(start_raw.strip()), int(end_raw.strip())
            except ValueError:
                continue
            if start <= end:
                pages.update(range(start, end + 1))
        else:
            try:
                pages.add(int(part))
            except ValueError:
                continue
    return sorted(pages)


def resolve_page_selection(selection: Sequence[int] | None, page_count: int) -> list[int]:
    """Clamp a selection to ``[1, page_count]``; None selects every page."""
    if selection is None:
        return list(range(1, page_count + 1))
    return sorted({page for page in selection if 1 <= page <= page_count})
