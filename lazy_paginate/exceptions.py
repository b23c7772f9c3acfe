"""Exceptions raised by lazy_paginate."""


class PaginationConfigError(ValueError):
    """Raised when pagination options are invalid."""
    pass


class PageResultError(TypeError):
    """Raised when a fetch function returns something that is not a page."""
    pass
