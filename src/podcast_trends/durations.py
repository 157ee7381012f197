"""Maximum episode length filter options exposed to the web UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, get_args

MaxDurationOption = Literal["5", "10", "unlimited"]

_VALID_OPTIONS: frozenset[str] = frozenset(get_args(MaxDurationOption))
_DEFAULT_OPTION: MaxDurationOption = "unlimited"


@dataclass(frozen=True, slots=True)
class DurationOption:
    """One selectable duration filter."""

    value: MaxDurationOption
    label: str
    seconds: int | None = None


DURATION_OPTIONS: tuple[DurationOption, ...] = (
    DurationOption(value="5", label="5分以内", seconds=5 * 60),
    DurationOption(value="10", label="10分以内", seconds=10 * 60),
    DurationOption(value="unlimited", label="無制限"),
)

_OPTION_LOOKUP: dict[str, DurationOption] = {opt.value: opt for opt in DURATION_OPTIONS}


def normalize_max_duration(value: object) -> MaxDurationOption:
    """Coerce arbitrary input to a known option, defaulting to unlimited."""
    if isinstance(value, str) and value in _VALID_OPTIONS:
        return _OPTION_LOOKUP[value].value
    return _DEFAULT_OPTION


def max_duration_to_seconds(option: MaxDurationOption) -> int | None:
    """Return the filter in seconds, or None when unbounded."""
    return _OPTION_LOOKUP[option].seconds
