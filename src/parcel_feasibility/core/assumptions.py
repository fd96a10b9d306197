"""Adjustable energy-density assumptions and change notification."""

import logging
import math
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_SOLAR_DENSITY = 0.5
DEFAULT_WIND_DENSITY = 0.1
SOLAR_RANGE = (0.1, 2.0)
WIND_RANGE = (0.05, 0.5)


class AssumptionSet(BaseModel):
    """Energy density coefficients in MW per hectare."""
    model_config = ConfigDict(frozen=True)

    solar_density: float = Field(default=DEFAULT_SOLAR_DENSITY, ge=SOLAR_RANGE[0], le=SOLAR_RANGE[1])
    wind_density: float = Field(default=DEFAULT_WIND_DENSITY, ge=WIND_RANGE[0], le=WIND_RANGE[1])


Subscriber = Callable[[AssumptionSet], object]


def _clamp(name: str, value: float, bounds: tuple[float, float], default: float) -> float:
    value = float(value)
    if math.isnan(value):
        logger.warning("%s is not a number; using default %s", name, default)
        return default
    lo, hi = bounds
    clamped = min(max(value, lo), hi)
    if clamped != value:
        logger.warning("%s %s outside [%s, %s]; clamped to %s", name, value, lo, hi, clamped)
    return clamped


class AssumptionState:
    """Holds the current AssumptionSet and notifies subscribers on change.

    Out-of-range input is clamped to the nearest bound (NaN falls back to the
    default). Subscribers run synchronously, in subscription order, and only
    when the stored value actually changes.
    """

    def __init__(self, initial: AssumptionSet | None = None):
        self._current = initial or AssumptionSet()
        self._subscribers: list[Subscriber] = []

    def get(self) -> AssumptionSet:
        return self._current

    def subscribe(self, callback: Subscriber) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def set_solar_density(self, value: float) -> float:
        v = _clamp("solar_density", value, SOLAR_RANGE, DEFAULT_SOLAR_DENSITY)
        self._replace(self._current.model_copy(update={"solar_density": v}))
        return v

    def set_wind_density(self, value: float) -> float:
        v = _clamp("wind_density", value, WIND_RANGE, DEFAULT_WIND_DENSITY)
        self._replace(self._current.model_copy(update={"wind_density": v}))
        return v

    def reset_to_defaults(self) -> AssumptionSet:
        if self._replace(AssumptionSet()):
            logger.info("Assumptions reset to defaults")
        return self._current

    def _replace(self, new: AssumptionSet) -> bool:
        if new == self._current:
            return False
        self._current = new
        for callback in list(self._subscribers):
            callback(new)
        return True
