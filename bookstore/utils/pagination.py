# bookstore/utils/pagination.py
from dataclasses import dataclass, asdict
from math import ceil
from typing import Any, List, Optional, Sequence, Union

ELLIPSIS = "..."

PageLink = Union[int, str]


@dataclass(frozen=True)
class PageInfo:
    total_pages: int
    current_page: int
    has_previous_page: bool
    has_next_page: bool
    previous_page: Optional[int]
    next_page: Optional[int]
    has_ellipsis_before: bool
    has_ellipsis_after: bool
    page_links: List[PageLink]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def paginate(total_count: int, limit: int, page: int, window_size: int = 5) -> PageInfo:
    """Compute page metadata and the windowed list of page links.

    Page 1 and the last page are always linked, plus every page within
    ``(window_size - 1) // 2`` of the current one. A gap between the window
    and either end is shown as a single ``"..."`` when it hides two or more
    pages; a gap of exactly one page shows that page instead.

    Requested pages outside ``1..total_pages`` are clamped. With no records
    there are no pages and ``current_page`` is 1.
    """
    if not all(_is_int(v) for v in (total_count, limit, page, window_size)):
        raise ValueError("Invalid input parameters")
    if total_count < 0 or limit < 1 or window_size < 1 or window_size % 2 == 0:
        raise ValueError("Invalid input parameters")

    total_pages = ceil(total_count / limit)
    current_page = max(1, min(page, total_pages))

    has_previous_page = current_page > 1
    has_next_page = current_page < total_pages

    page_links: List[PageLink] = []
    has_ellipsis_before = has_ellipsis_after = False

    if total_pages:
        half = (window_size - 1) // 2
        start = max(1, current_page - half)
        end = min(total_pages, current_page + half)

        if start > 1:
            page_links.append(1)
            hidden = start - 2
            if hidden >= 2:
                page_links.append(ELLIPSIS)
                has_ellipsis_before = True
            elif hidden == 1:
                page_links.append(2)

        page_links.extend(range(start, end + 1))

        if end < total_pages:
            hidden = total_pages - end - 1
            if hidden >= 2:
                page_links.append(ELLIPSIS)
                has_ellipsis_after = True
            elif hidden == 1:
                page_links.append(total_pages - 1)
            page_links.append(total_pages)

    return PageInfo(
        total_pages=total_pages,
        current_page=current_page,
        has_previous_page=has_previous_page,
        has_next_page=has_next_page,
        previous_page=current_page - 1 if has_previous_page else None,
        next_page=current_page + 1 if has_next_page else None,
        has_ellipsis_before=has_ellipsis_before,
        has_ellipsis_after=has_ellipsis_after,
        page_links=page_links,
    )


def page_offset(total_count: int, limit: int, page: int) -> int:
    """Row offset of the page ``paginate`` would report as current."""
    return (paginate(total_count, limit, page).current_page - 1) * limit


def paginate_result(count: int, results: Sequence[Any], limit: int, page: int, max_page_links: int = 5) -> dict:
    # Wrap an already-sliced result set with its page metadata
    if not isinstance(results, (list, tuple)):
        raise ValueError("Invalid input parameters")
    info = paginate(count, limit, page, max_page_links)
    return {"results": list(results), "total_records": count, **asdict(info)}
