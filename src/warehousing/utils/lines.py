"""Decoding of the JSON line lists carried by transfer and adjustment commands."""

import json

from protean.exceptions import ValidationError


def _is_whole_number(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_lines(raw, integer_fields=()) -> list[dict]:
    """Decode ``raw`` into a list of line dicts.

    ``raw`` is either a JSON string or an already decoded list. Every line must
    be an object naming a ``product_id``, and each of ``integer_fields`` that a
    line carries must be a whole number. An empty or missing list is returned
    as ``[]`` for the caller to reject.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            raise ValidationError({"lines": ["Lines must be valid JSON"]}) from None
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError({"lines": ["Lines must be a JSON array"]})

    for line in raw:
        if not isinstance(line, dict):
            raise ValidationError({"lines": ["Each line must be a JSON object"]})
        if line.get("product_id") in (None, ""):
            raise ValidationError({"lines": ["Each line needs a product_id"]})
        for name in integer_fields:
            value = line.get(name)
            if value is not None and not _is_whole_number(value):
                raise ValidationError({"lines": [f"{name} for product {line['product_id']} must be a whole number"]})
    return raw
