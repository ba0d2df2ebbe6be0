"""Compile a structured filter tree into a Gmail search fragment."""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from loguru import logger
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from gmailreader.domain.errors import FilterCompileError

# Gmail search operators that take a value; time is driven by the read range
SEARCH_FIELDS = frozenset({
    "from", "to", "cc", "bcc", "subject", "label", "category", "filename",
    "list", "deliveredto", "has", "is", "in", "rfc822msgid", "larger", "smaller",
})


class TextNode(BaseModel):
    type: Literal["text"] = "text"
    value: str


class MatchNode(BaseModel):
    type: Literal["match"] = "match"
    field: str
    op: Literal["==", "!="] = "=="
    value: str


class AndNode(BaseModel):
    type: Literal["and"] = "and"
    operands: list["FilterNode"] = Field(min_length=1)


class OrNode(BaseModel):
    type: Literal["or"] = "or"
    operands: list["FilterNode"] = Field(min_length=1)


class NotNode(BaseModel):
    type: Literal["not"] = "not"
    operand: "FilterNode"


FilterNode = Annotated[
    Union[TextNode, MatchNode, AndNode, OrNode, NotNode],
    Field(discriminator="type"),
]

for _model in (AndNode, OrNode, NotNode):
    _model.model_rebuild()

_FILTER_ADAPTER: TypeAdapter[Any] = TypeAdapter(FilterNode)


def parse_filter_ast(data: str | dict[str, Any]) -> FilterNode:
    """Parse a JSON string or mapping into a filter tree."""
    try:
        if isinstance(data, str):
            return _FILTER_ADAPTER.validate_python(json.loads(data))
        return _FILTER_ADAPTER.validate_python(data)
    except (ValidationError, ValueError) as e:
        raise FilterCompileError(f"invalid filter tree: {e}") from e


def _quote(value: str) -> str:
    value = value.strip()
    if not value:
        raise FilterCompileError("empty search term")
    if any(ch.isspace() for ch in value) or value.startswith("-"):
        escaped = value.replace('"', '\\"')
        return f'"{escaped}"'
    return value


class FilterGmailCompiler:
    """Turns a filter tree into Gmail search syntax.

    and -> ``(a b)``, or -> ``(a OR b)``, not -> ``-a``, field match ->
    ``field:value``.
    """

    def compile(self, node: FilterNode) -> str:
        expr = self._compile(node)
        logger.debug(f"Compiled filter expression: {expr}")
        return expr

    def _compile(self, node: FilterNode) -> str:
        if isinstance(node, TextNode):
            return _quote(node.value)
        if isinstance(node, MatchNode):
            field = node.field.lower()
            if field not in SEARCH_FIELDS:
                raise FilterCompileError(f"field '{node.field}' cannot be searched in Gmail")
            term = f"{field}:{_quote(node.value)}"
            return term if node.op == "==" else f"-{term}"
        if isinstance(node, AndNode):
            return self._group([self._compile(n) for n in node.operands], " ")
        if isinstance(node, OrNode):
            return self._group([self._compile(n) for n in node.operands], " OR ")
        if isinstance(node, NotNode):
            inner = self._compile(node.operand)
            if inner.startswith("-"):
                # Gmail has no double negation
                return f"-({inner})"
            return f"-{inner}"
        raise FilterCompileError(f"unsupported filter node: {type(node).__name__}")

    @staticmethod
    def _group(terms: list[str], sep: str) -> str:
        if len(terms) == 1:
            return terms[0]
        return "(" + sep.join(terms) + ")"
