# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Argument normalization for operation matching.

Route descriptions carry arguments in two shapes:

- keyed: ``{"header": "X-Request-Id", "regexp": "\\d+"}``, used as is;
- positional: ``["X-Request-Id", "\\d+"]``, assigned to the candidate's
  parameter names by position when the lengths are equal.

A single bare string is a one-element positional list, and a keyed map whose
keys are all generated keys (``_genkey_0``, ``_genkey_1``...) is positional
too, ordered by index.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

__all__ = ["GENERATED_KEY_PREFIX", "RawArgs", "generate_key", "normalize_args"]

GENERATED_KEY_PREFIX = "_genkey_"

RawArgs = Mapping[str, str] | Sequence[str] | str


def generate_key(index: int) -> str:
    """Return the generated key used for the positional argument ``index``."""
    return f"{GENERATED_KEY_PREFIX}{index}"


def _is_generated_key(key: str) -> bool:
    return key.startswith(GENERATED_KEY_PREFIX) and key[len(GENERATED_KEY_PREFIX) :].isdigit()


def _positional(raw_args: RawArgs) -> list[str] | None:
    if isinstance(raw_args, str):
        return [raw_args]
    if isinstance(raw_args, Mapping):
        if raw_args and all(_is_generated_key(key) for key in raw_args):
            ordered = sorted(raw_args, key=lambda key: int(key[len(GENERATED_KEY_PREFIX) :]))
            return [raw_args[key] for key in ordered]
        return None
    return list(raw_args)


def normalize_args(raw_args: RawArgs, parameter_names: Sequence[str]) -> dict[str, str] | None:
    """Align ``raw_args`` to ``parameter_names``.

    Args:
        raw_args: Arguments as configured.
        parameter_names: Matchable parameter names of one candidate, in
            declaration order.

    Returns:
        A name-keyed dict, or None when positional arguments cannot be
        aligned (arity mismatch) and the candidate must be excluded.
    """
    values = _positional(raw_args)
    if values is None:
        return dict(raw_args)  # type: ignore[arg-type]
    if len(values) != len(parameter_names):
        return None
    return dict(zip(parameter_names, values))
