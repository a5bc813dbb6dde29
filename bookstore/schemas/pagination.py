from pydantic import BaseModel
from typing import List, Optional, Union

# Page metadata shared by every paginated listing
class PageMeta(BaseModel):
    total_records: int
    total_pages: int
    current_page: int
    has_previous_page: bool
    has_next_page: bool
    previous_page: Optional[int] = None
    next_page: Optional[int] = None
    has_ellipsis_before: bool
    has_ellipsis_after: bool
    page_links: List[Union[int, str]]
