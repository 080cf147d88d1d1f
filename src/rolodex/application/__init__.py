"""Application layer: use cases, ports, pagination and DTOs. Depends only on domain."""

from rolodex.application.contact_service import ContactService
from rolodex.application.dto import Invalid
from rolodex.application.pagination import (
    DEFAULT_PAGE_NO,
    DEFAULT_PAGE_SIZE,
    PAGINATION_VALUE_MAX,
    Pagination,
    get_limit_and_offset,
    parse_pagination_value,
)
from rolodex.application.ports import ContactChecks, ContactRepository

__all__ = [
    "DEFAULT_PAGE_NO",
    "DEFAULT_PAGE_SIZE",
    "PAGINATION_VALUE_MAX",
    "ContactChecks",
    "ContactRepository",
    "ContactService",
    "Invalid",
    "Pagination",
    "get_limit_and_offset",
    "parse_pagination_value",
]
