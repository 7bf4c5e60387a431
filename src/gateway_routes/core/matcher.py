"""Overload selection.

``match_operation`` is the pure selection rule: a candidate matches when its
matchable parameter-name set has the size of the argument-key set and holds
every key. The first match in catalog order wins.

``find_operation`` runs the normalizer per candidate and returns the first
candidate whose normalized arguments match, paired with those arguments.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field

from .arguments import RawArgs, normalize_args
from .catalog import OperationCatalog, OperationDescriptor

__all__ = ["NormalizedOperation", "find_operation", "match_operation", "matches"]


@dataclass(frozen=True)
class NormalizedOperation:
    """A candidate overload paired with the arguments normalized for it."""

    descriptor: OperationDescriptor
    args: dict[str, str] = field(default_factory=dict)


def matches(descriptor: OperationDescriptor, arg_keys: Collection[str]) -> bool:
    names = descriptor.parameter_names
    if len(names) != len(arg_keys):
        return False
    return all(key in names for key in arg_keys)


def match_operation(
    candidates: Iterable[OperationDescriptor], arg_keys: Collection[str]
) -> OperationDescriptor | None:
    """Return the first candidate whose parameter names equal ``arg_keys``."""
    for candidate in candidates:
        if matches(candidate, arg_keys):
            return candidate
    return None


def find_operation(
    catalog: OperationCatalog, name: str, raw_args: RawArgs
) -> NormalizedOperation | None:
    """Resolve ``name`` with ``raw_args`` against ``catalog``.

    Returns:
        The first matching NormalizedOperation, or None.
    """
    for candidate in catalog.candidates(name):
        args = normalize_args(raw_args, candidate.parameter_names)
        if args is not None and matches(candidate, args):
            return NormalizedOperation(candidate, args)
    return None
