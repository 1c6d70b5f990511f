"""
txnledger/api/boundary.py

The call boundary in front of a Ledger.

Callers name a method and pass a JSON-style dict of arguments; results come
back as JSON-ready values (wire dicts, lists of wire dicts, or None).

    method            alias                    args            result
    ───────────────   ──────────────────────   ─────────────   ──────────────
    append            setTransaction           11 wire fields  None
    listAll           getTransactions          -               [record, ...]
    listByUser        getTransactionsByUser    user            [record, ...]
    findByReference   getTransactionById       reference       record | None

The aliases are the method names the ledger was first deployed under, kept
so existing invocations keep working.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from txnledger.core.exceptions import UnknownMethodError, ValidationError
from txnledger.core.models import TransactionRecord
from txnledger.ledger import Ledger


ALIASES: Dict[str, str] = {
    "setTransaction":        "append",
    "getTransactions":       "listAll",
    "getTransactionsByUser": "listByUser",
    "getTransactionById":    "findByReference",
}


def _expect_args(method: str, args: Any, names: Iterable[str]) -> Dict[str, Any]:
    if args is None:
        args = {}
    if not isinstance(args, dict):
        raise ValidationError(
            f"{method}: arguments must be an object, got {type(args).__name__}"
        )
    names   = set(names)
    missing = sorted(names - set(args))
    extra   = sorted(set(args) - names)
    if missing:
        raise ValidationError(
            f"{method}: missing arguments", {"missing": ",".join(missing)}
        )
    if extra:
        raise ValidationError(
            f"{method}: unexpected arguments", {"unexpected": ",".join(extra)}
        )
    for name in names:
        if not isinstance(args[name], str):
            raise ValidationError(
                f"{method}: {name} must be str, got {type(args[name]).__name__}"
            )
    return args


class LedgerService:
    """Dispatches boundary calls onto one injected Ledger."""

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self._handlers: Dict[str, Callable[[Optional[Dict[str, Any]]], Any]] = {
            "append":          self.append,
            "listAll":         self.list_all,
            "listByUser":      self.list_by_user,
            "findByReference": self.find_by_reference,
        }

    @property
    def methods(self) -> List[str]:
        return sorted(list(self._handlers) + list(ALIASES))

    def invoke(self, method: str, args: Optional[Dict[str, Any]] = None) -> Any:
        """Call `method` with `args`. Raises UnknownMethodError for anything else."""
        handler = self._handlers.get(ALIASES.get(method, method))
        if handler is None:
            raise UnknownMethodError(
                f"Unknown method {method!r}",
                {"available": ",".join(self.methods)},
            )
        return handler(args)

    # ── Operations ────────────────────────────────────────────

    def append(self, args: Optional[Dict[str, Any]]) -> None:
        if not isinstance(args, dict):
            raise ValidationError(
                f"append: arguments must be an object, got {type(args).__name__}"
            )
        self.ledger.append_record(TransactionRecord.from_dict(args))

    def list_all(self, args: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        _expect_args("listAll", args, ())
        return [r.to_dict() for r in self.ledger.list_all()]

    def list_by_user(self, args: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        args = _expect_args("listByUser", args, ("user",))
        return [r.to_dict() for r in self.ledger.list_by_user(args["user"])]

    def find_by_reference(self, args: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        args   = _expect_args("findByReference", args, ("reference",))
        record = self.ledger.find_by_reference(args["reference"])
        return record.to_dict() if record is not None else None
