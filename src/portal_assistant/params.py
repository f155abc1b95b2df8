"""
Request parameter normalization.

Callers pass a plain dict as ``params`` to `BaseAsyncLLM.chat`. Keys every
provider understands stay at the top level:

  temperature: float
  max_tokens: int
  top_p: float
  tools: list
  tool_choice: str | dict
  stop: str | list[str]
  response_format: dict
  seed: int

Anything else is moved under ``extra`` and forwarded to the provider as-is.
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = ["STANDARD_KEYS", "normalize_params", "merge_params"]

STANDARD_KEYS = frozenset(
    {
        "temperature",
        "max_tokens",
        "top_p",
        "tools",
        "tool_choice",
        "stop",
        "response_format",
        "seed",
    }
)


def normalize_params(params: Optional[dict[str, Any]]) -> dict[str, Any]:
    """
    Normalize a user-supplied params dict to ``{standard keys..., "extra": {...}}``.

    None values are kept so adapters can decide to drop them. A caller-supplied
    ``extra`` dict wins over keys moved there from the top level.

    >>> normalize_params({"temperature": 0.2, "thinking": "low"})
    {'temperature': 0.2, 'extra': {'thinking': 'low'}}
    """
    if params is None:
        return {"extra": {}}
    if not isinstance(params, dict):
        raise TypeError(f"params must be a dict, got {type(params).__name__}")

    user_extra = params.get("extra") or {}
    if not isinstance(user_extra, dict):
        raise TypeError("params['extra'] must be a dict")

    std: dict[str, Any] = {}
    moved: dict[str, Any] = {}
    for key, value in params.items():
        if key == "extra":
            continue
        if key in STANDARD_KEYS:
            std[key] = value
        else:
            moved[key] = value

    std["extra"] = {**moved, **user_extra}
    return std


def merge_params(
    defaults: Optional[dict[str, Any]], overrides: Optional[dict[str, Any]]
) -> dict[str, Any]:
    """
    Shallow-merge session defaults with per-call overrides, then normalize.

    Top-level keys are overwritten; ``extra`` is merged key by key.
    """
    base = normalize_params(defaults)
    if not overrides:
        return base

    over = normalize_params(overrides)
    merged_extra = {**base.pop("extra"), **over.pop("extra")}
    base.update(over)
    base["extra"] = merged_extra
    return base
