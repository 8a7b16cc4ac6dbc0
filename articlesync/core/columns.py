"""Export sections and column expressions.

A column expression names a qualified source column and an optional
output name: ``"article.id as articleId"``. Without ``as`` the output name
is the part after the last dot.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any

from .errors import ValidationError
from .models import ColumnExpression

# Qualified columns every store adapter must provide per section.
DEFAULT_COLUMNS: dict[str, tuple[str, ...]] = {
    "article": (
        "article.id",
        "article.name",
        "article.description",
        "article.active",
        "article.taxId",
        "supplier.id",
        "supplier.name",
        "variant.id",
        "variant.number",
        "variant.kind",
        "variant.inStock",
        "variant.active",
        "mainVariant.number",
    ),
    "price": (
        "prices.id",
        "prices.articleId",
        "prices.articleDetailsId",
        "prices.customerGroupKey",
        "prices.from",
        "prices.to",
        "prices.price",
        "prices.pseudoPrice",
    ),
    "image": (
        "images.id",
        "images.articleId",
        "images.path",
        "images.extension",
        "images.main",
        "images.description",
        "images.position",
        "images.mediaId",
    ),
    "propertyValue": (
        "article.id",
        "propertyValue.id",
        "propertyValue.value",
        "propertyOption.name",
    ),
    "similar": (
        "similar.id",
        "similar.articleId",
        "similarDetail.number",
    ),
    "accessory": (
        "accessory.id",
        "accessory.articleId",
        "accessoryDetail.number",
    ),
    "category": (
        "categories.id",
        "categories.articleId",
        "categories.name",
    ),
    "translation": (
        "article.id",
        "translation.languageId",
        "translation.name",
        "translation.description",
    ),
    "configurator": (
        "variant.id",
        "variant.number",
        "configuratorGroup.name",
        "configuratorOption.name",
    ),
}

SECTIONS: tuple[str, ...] = tuple(DEFAULT_COLUMNS)

SECTION_ALIASES = {
    "propertyValues": "propertyValue",
    "prices": "price",
    "images": "image",
    "categories": "category",
    "translations": "translation",
}

_EXPRESSION = re.compile(
    r"^\s*(?P<source>[A-Za-z_]\w*\.[A-Za-z_]\w*)(?:\s+as\s+(?P<alias>[A-Za-z_]\w*))?\s*$",
    re.IGNORECASE,
)


def parse_column(expression: str) -> ColumnExpression:
    """Parse a single column expression.

    Raises:
        ValidationError: If the expression is malformed.
    """
    match = _EXPRESSION.match(expression or "")
    if match is None:
        raise ValidationError(f"Invalid column expression {expression!r}")
    source = match.group("source")
    alias = match.group("alias") or source.rsplit(".", 1)[1]
    return ColumnExpression(source=source, alias=alias)


def normalize_section(name: str) -> str:
    section = SECTION_ALIASES.get(name, name)
    if section not in DEFAULT_COLUMNS:
        raise ValidationError(f"Unknown export section {name!r}")
    return section


def parse_columns(
    columns: Mapping[str, str | Sequence[str]],
) -> dict[str, tuple[ColumnExpression, ...]]:
    """Parse the requested columns of every section.

    A section may be given a single expression string or a sequence of
    them. Section aliases (``propertyValues``) are folded into their
    canonical name.

    Raises:
        ValidationError: If a section or column is unknown or no columns
            are requested for a section.
    """
    parsed: dict[str, tuple[ColumnExpression, ...]] = {}
    for name, expressions in columns.items():
        section = normalize_section(name)
        if isinstance(expressions, str):
            expressions = [expressions]
        if not expressions:
            raise ValidationError(f"No columns requested for section {name!r}")

        known = DEFAULT_COLUMNS[section]
        parsed_section = list(parsed.get(section, ()))
        for expression in expressions:
            column = parse_column(expression)
            if column.source not in known:
                raise ValidationError(
                    f"Unknown column {column.source!r} in section {section!r}"
                )
            parsed_section.append(column)
        parsed[section] = tuple(parsed_section)
    return parsed


def project(
    rows: Sequence[Mapping[str, Any]], columns: Sequence[ColumnExpression]
) -> list[dict[str, Any]]:
    """Keep only the requested columns of each row, renamed to their alias."""
    return [{column.alias: row.get(column.source) for column in columns} for row in rows]


def default_column_expressions() -> dict[str, list[str]]:
    """All exportable columns as ``source as alias`` expressions."""
    result: dict[str, list[str]] = {}
    for section, sources in DEFAULT_COLUMNS.items():
        result[section] = [
            f"{source} as {_default_alias(source)}" for source in sources
        ]
    return result


def _default_alias(source: str) -> str:
    prefix, field = source.split(".", 1)
    return f"{prefix}{field[0].upper()}{field[1:]}"
