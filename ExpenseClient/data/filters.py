"""Pagination and filter state of the expense list."""
import dataclasses
from typing import List, Optional

from ..core.types import ExpenseFilters, Page
from .validation import parse_amount

DEFAULT_PAGE_SIZE: int = 10
PAGE_SIZES: List[int] = [10, 20, 50, 100]
SORT: str = 'date,desc'


@dataclasses.dataclass
class FilterFields:
    """The raw values of the filter inputs."""
    q: str = ''
    from_date: str = ''
    to_date: str = ''
    category_id: Optional[int] = None
    min_amount: str = ''
    max_amount: str = ''
    currency: str = ''
    tag: str = ''


def build_filters(fields: FilterFields) -> ExpenseFilters:
    """
    Build the query filters from the raw inputs, keeping non-empty fields only.

    Raises:
        ValueError: If an amount bound is not a number.
    """
    filters = ExpenseFilters()

    if fields.from_date.strip():
        filters.from_date = fields.from_date.strip()
    if fields.to_date.strip():
        filters.to_date = fields.to_date.strip()
    if fields.category_id:
        filters.category_id = int(fields.category_id)
    if fields.min_amount.strip():
        filters.min_amount = parse_amount(fields.min_amount)
        if filters.min_amount is None:
            raise ValueError('Minimum amount must be a number')
    if fields.max_amount.strip():
        filters.max_amount = parse_amount(fields.max_amount)
        if filters.max_amount is None:
            raise ValueError('Maximum amount must be a number')
    if fields.q.strip():
        filters.q = fields.q.strip()
    if fields.currency.strip():
        filters.currency = fields.currency.strip()
    if fields.tag.strip():
        filters.tag = fields.tag.strip()

    return filters


class ExpenseListState:
    """Page, page size, totals and active filters of the expense list.

    Changing the filters or the page size goes back to the first page.
    """

    def __init__(self, size: int = DEFAULT_PAGE_SIZE) -> None:
        self.page: int = 0
        self.size: int = size if size in PAGE_SIZES else DEFAULT_PAGE_SIZE
        self.total_pages: int = 0
        self.total_elements: int = 0
        self.row_count: int = 0
        self.filters: ExpenseFilters = ExpenseFilters()
        self.fields: FilterFields = FilterFields()

    def apply_filters(self, fields: FilterFields) -> ExpenseFilters:
        """
        Make ``fields`` the active filters and go back to the first page.

        Raises:
            ValueError: If an amount bound is not a number. The state is left unchanged.
        """
        filters = build_filters(fields)
        self.fields = dataclasses.replace(fields)
        self.filters = filters
        self.page = 0
        return filters

    def clear_filters(self) -> None:
        self.fields = FilterFields()
        self.filters = ExpenseFilters()
        self.page = 0

    def set_size(self, size: int) -> None:
        if size not in PAGE_SIZES:
            raise ValueError(f'Page size must be one of {PAGE_SIZES}, got {size}')
        self.size = size
        self.page = 0

    def update(self, page: Page) -> None:
        """Take the totals from a fetched page."""
        self.total_pages = page.total_pages
        self.total_elements = page.total_elements
        self.row_count = len(page.content)

    def has_previous(self) -> bool:
        return self.page > 0

    def has_next(self) -> bool:
        return self.page < self.total_pages - 1

    def previous_page(self) -> None:
        if self.has_previous():
            self.page -= 1

    def next_page(self) -> None:
        if self.has_next():
            self.page += 1

    def range_text(self) -> str:
        start = self.page * self.size + 1 if self.row_count > 0 else 0
        end = min((self.page + 1) * self.size, self.total_elements)
        return f'Showing {start} - {end} of {self.total_elements} expenses'

    def page_text(self) -> str:
        return f'Page {self.page + 1} of {max(self.total_pages, 1)}'
