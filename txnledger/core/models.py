"""
txnledger/core/models.py

Transaction record model.

Wire shape (the only shape records take across the call boundary and on disk):

    {
        "txn_type":       str,
        "purpose":        str,
        "amount":         u64,
        "user":           str,
        "reference":      str,
        "balance_before": u64,
        "balance_after":  u64,
        "status":         str,
        "description":    str,
        "createdAt":      str,
        "updatedAt":      str,
    }

Shape checks only. Empty strings, zero amounts and balance_after values that
do not follow from balance_before and amount are all accepted as given.
u64 values may arrive as base-10 digit strings ("20000") and are stored as int.
Timestamps are opaque caller strings and are never generated here.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from txnledger.core.exceptions import ValidationError


U64_MAX = 2 ** 64 - 1

# (wire name, python attribute, kind)
_FIELDS: Tuple[Tuple[str, str, str], ...] = (
    ("txn_type",       "txn_type",       "str"),
    ("purpose",        "purpose",        "str"),
    ("amount",         "amount",         "u64"),
    ("user",           "user",           "str"),
    ("reference",      "reference",      "str"),
    ("balance_before", "balance_before", "u64"),
    ("balance_after",  "balance_after",  "u64"),
    ("status",         "status",         "str"),
    ("description",    "description",    "str"),
    ("createdAt",      "created_at",     "str"),
    ("updatedAt",      "updated_at",     "str"),
)

WIRE_FIELDS: List[str] = [wire for wire, _, _ in _FIELDS]


def coerce_u64(value: Any, field: str) -> int:
    """
    Return value as an int in [0, 2**64 - 1].

    Accepts int (not bool) or a string of ASCII digits.
    Raises ValidationError for anything else.
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field} must be an unsigned 64-bit integer, got bool",
            {"field": field},
        )
    if isinstance(value, str):
        if not value.isascii() or not value.isdigit():
            raise ValidationError(
                f"{field} must be a base-10 unsigned integer string, got {value!r}",
                {"field": field},
            )
        value = int(value)
    if not isinstance(value, int):
        raise ValidationError(
            f"{field} must be an unsigned 64-bit integer, "
            f"got {type(value).__name__}",
            {"field": field},
        )
    if value < 0 or value > U64_MAX:
        raise ValidationError(
            f"{field} out of u64 range: {value}",
            {"field": field},
        )
    return value


def _require_str(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(
            f"{field} must be str, got {type(value).__name__}",
            {"field": field},
        )
    return value


@dataclass(frozen=True)
class TransactionRecord:
    """
    One transaction event. Frozen: a record never changes after it is built.
    """

    txn_type:       str
    purpose:        str
    amount:         int
    user:           str
    reference:      str
    balance_before: int
    balance_after:  int
    status:         str
    description:    str
    created_at:     str
    updated_at:     str

    def __post_init__(self) -> None:
        for wire, attr, kind in _FIELDS:
            value = getattr(self, attr)
            if kind == "u64":
                # frozen dataclass: normalise "20000" → 20000 in place
                object.__setattr__(self, attr, coerce_u64(value, wire))
            else:
                _require_str(value, wire)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionRecord":
        """
        Build a record from a wire dict.

        Every wire field must be present. Unknown keys are rejected so a
        misspelled field never silently drops data.
        """
        if not isinstance(data, dict):
            raise ValidationError(
                f"record must be a dict, got {type(data).__name__}"
            )
        missing = [wire for wire in WIRE_FIELDS if wire not in data]
        if missing:
            raise ValidationError(
                "record is missing fields",
                {"missing": ",".join(missing)},
            )
        unknown = sorted(set(data) - set(WIRE_FIELDS))
        if unknown:
            raise ValidationError(
                "record has unknown fields",
                {"unknown": ",".join(unknown)},
            )
        return cls(**{attr: data[wire] for wire, attr, _ in _FIELDS})

    def to_dict(self) -> Dict[str, Any]:
        """Wire dict with the exact field names of the call boundary."""
        return {wire: getattr(self, attr) for wire, attr, _ in _FIELDS}
