"""Session-scoped order list filtering and paging service."""
