"""Pagination core: page fetching, page iteration and query observation."""
