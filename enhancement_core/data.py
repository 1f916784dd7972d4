"""Default parameters, configuration presets, and mapping helpers."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import fields, replace
from pathlib import Path
from typing import Final

from .errors import InvalidConfiguration
from .models import Configuration

logger = logging.getLogger(__name__)

DEFAULT_SEED: Final[int] = 12345
DEFAULT_TRIAL_COUNT: Final[int] = 20000
MIN_RECOMMENDED_TRIALS: Final[int] = 100
MAX_RECOMMENDED_TRIALS: Final[int] = 200_000
DEFAULT_HISTOGRAM_BIN_WIDTH: Final[int] = 5
DEFAULT_MAX_ATTEMPTS_PER_RUN: Final[int] = 10_000_000

DEFAULT_FROM_LEVEL: Final[int] = 18
DEFAULT_COST_PER_ATTEMPT: Final[int] = 170000
DEFAULT_STAGE_PROBABILITY: Final[float] = 0.2
DEFAULT_FINAL_PROBABILITY: Final[float] = 0.2
DEFAULT_STAGE_PITY_THRESHOLD: Final[int] = 6
DEFAULT_FINAL_PITY_THRESHOLD: Final[int] = 6
QUICK_RATE_PRESETS: Final[tuple[float, ...]] = (0.2, 0.24, 0.27)

CONFIGURATION_KEYS: Final[tuple[str, ...]] = tuple(field.name for field in fields(Configuration))


def suggested_stage_count(level: int) -> int:
    """Return the usual number of stages required to upgrade from ``level``.

    Levels up to +15 need 3 stages, +20 and above need 5, everything in between 4.
    """

    if level <= 15:
        return 3
    if level >= 20:
        return 5
    return 4


def resize_stage_probabilities(
    probabilities: Sequence[float],
    stage_count: int,
) -> list[float]:
    """Truncate or pad per-stage probabilities to ``stage_count`` entries.

    Padding repeats the last supplied value, or ``DEFAULT_STAGE_PROBABILITY`` when
    the input is empty. The engine never calls this itself: a ``Configuration``
    with a mismatched length is rejected.
    """

    resized = list(probabilities[:stage_count])
    fill = probabilities[-1] if len(probabilities) else DEFAULT_STAGE_PROBABILITY
    while len(resized) < stage_count:
        resized.append(fill)
    return resized


def default_configuration(level: int = DEFAULT_FROM_LEVEL) -> Configuration:
    """Return the default configuration for upgrading from ``level``."""

    stage_count = suggested_stage_count(level)
    return Configuration(
        stage_count=stage_count,
        stage_probabilities=(DEFAULT_STAGE_PROBABILITY,) * stage_count,
        final_probability=DEFAULT_FINAL_PROBABILITY,
        cost_per_attempt=DEFAULT_COST_PER_ATTEMPT,
        stage_pity_threshold=DEFAULT_STAGE_PITY_THRESHOLD,
        final_pity_threshold=DEFAULT_FINAL_PITY_THRESHOLD,
    )


def with_uniform_rate(config: Configuration, rate: float) -> Configuration:
    """Return a copy of ``config`` with every stage and the final set to ``rate``."""

    return replace(
        config,
        stage_probabilities=(rate,) * config.stage_count,
        final_probability=rate,
    )


def configuration_from_mapping(mapping: Mapping[str, object]) -> Configuration:
    """Build a configuration from JSON-compatible snake_case keys.

    Parameters
    ----------
    mapping:
        Must provide every configuration field except
        ``reset_all_stage_pity_on_any_failure`` (defaults to False). Unknown keys
        are rejected.

    Raises
    ------
    InvalidConfiguration
        If keys are missing or unknown, or the values violate an invariant.
    """

    if not isinstance(mapping, Mapping):
        raise InvalidConfiguration(f"Configuration must be a mapping, received {type(mapping).__name__}")
    unknown = sorted(set(mapping) - set(CONFIGURATION_KEYS))
    if unknown:
        raise InvalidConfiguration(f"Unknown configuration keys: {', '.join(map(str, unknown))}")
    required = [key for key in CONFIGURATION_KEYS if key != "reset_all_stage_pity_on_any_failure"]
    missing = [key for key in required if key not in mapping]
    if missing:
        raise InvalidConfiguration(f"Missing configuration keys: {', '.join(missing)}")
    return Configuration(**{key: mapping[key] for key in CONFIGURATION_KEYS if key in mapping})


def configuration_to_mapping(config: Configuration) -> dict[str, object]:
    """Return the JSON-compatible mapping that ``configuration_from_mapping`` accepts."""

    mapping: dict[str, object] = {key: getattr(config, key) for key in CONFIGURATION_KEYS}
    mapping["stage_probabilities"] = list(config.stage_probabilities)
    return mapping


def load_configuration_presets(
    preset_path: str | Path | None,
) -> dict[str, Configuration]:
    """Load named configurations from the given JSON file.

    A missing or unreadable file yields an empty mapping. Entries that do not form
    a valid configuration are skipped and logged.
    """

    if not preset_path:
        return {}

    path = Path(preset_path)
    try:
        raw_data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable preset file %s: %s", path, exc)
        return {}

    if not isinstance(raw_data, Mapping):
        logger.warning("Ignoring preset file %s: top-level value is not an object", path)
        return {}

    presets: dict[str, Configuration] = {}
    for name, entry in raw_data.items():
        if not isinstance(entry, Mapping):
            logger.warning("Skipping preset %r: entry is not an object", name)
            continue
        try:
            presets[str(name)] = configuration_from_mapping(entry)
        except InvalidConfiguration as exc:
            logger.warning("Skipping preset %r: %s", name, exc)
    return presets

