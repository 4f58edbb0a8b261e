"""Column descriptor parsing for import formats.

A format lists its columns as ``name:type`` descriptors, for example
``Date Operation:date`` or ``Montant:montant``. A descriptor without a colon
is a text column.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

COLUMN_TYPE_TEXT = "texte"
COLUMN_TYPE_DATE = "date"
COLUMN_TYPE_AMOUNT = "montant"

_AMOUNT_TYPE_MARKERS = ("montant", "amount", "nombre", "numeric")


@dataclass(frozen=True)
class ColumnDefinition:
    """A parsed column descriptor."""

    source_name: str
    target_name: str
    type: str
    original: str


def resolve_column_type(type_name: str) -> str:
    """Map a free-form type name onto one of the supported column types."""
    lowered = type_name.strip().lower()
    if "date" in lowered:
        return COLUMN_TYPE_DATE
    if lowered == "number" or any(marker in lowered for marker in _AMOUNT_TYPE_MARKERS):
        return COLUMN_TYPE_AMOUNT
    return COLUMN_TYPE_TEXT


def parse_column_definition(definition: Optional[str]) -> Optional[ColumnDefinition]:
    """Parse a single ``name:type`` descriptor.

    Args:
        definition: Raw descriptor text

    Returns:
        ColumnDefinition, or None when the descriptor is empty or has no name
    """
    if definition is None:
        return None
    text = definition.strip()
    if not text:
        return None

    if ":" not in text:
        return ColumnDefinition(
            source_name=text,
            target_name=text.lower(),
            type=COLUMN_TYPE_TEXT,
            original=text,
        )

    name, type_name = text.split(":", 1)
    name = name.strip()
    if not name:
        return None

    return ColumnDefinition(
        source_name=name,
        target_name=name.lower(),
        type=resolve_column_type(type_name),
        original=text,
    )


def parse_column_definitions(definitions: Iterable[Optional[str]]) -> list[ColumnDefinition]:
    """Parse descriptors, dropping the invalid ones."""
    parsed = []
    for definition in definitions:
        column = parse_column_definition(definition)
        if column is not None:
            parsed.append(column)
    return parsed
