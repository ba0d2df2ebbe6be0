"""Gmail search query construction."""

from gmailreader.application.query.filter_compiler import (
    FilterGmailCompiler,
    FilterNode,
    parse_filter_ast,
)
from gmailreader.application.query.query_builder import build_search_query

__all__ = [
    "FilterGmailCompiler",
    "FilterNode",
    "parse_filter_ast",
    "build_search_query",
]
