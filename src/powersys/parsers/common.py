"""Conversions shared by the data readers."""

import math

from powersys.components import PrimeMovers, ThermalFuels

_THERMAL_FUELS = {
    "COAL": ThermalFuels.COAL,
    "NG": ThermalFuels.NATURAL_GAS,
    "NATURAL_GAS": ThermalFuels.NATURAL_GAS,
    "OIL": ThermalFuels.DISTILLATE_FUEL_OIL,
    "DFO": ThermalFuels.DISTILLATE_FUEL_OIL,
    "RFO": ThermalFuels.RESIDUAL_FUEL_OIL,
    "NUCLEAR": ThermalFuels.NUCLEAR,
}

_PRIME_MOVERS = {
    "CC": PrimeMovers.CC,
    "CT": PrimeMovers.CT,
    "ST": PrimeMovers.ST,
    "STEAM": PrimeMovers.ST,
    "NUCLEAR": PrimeMovers.ST,
    "HY": PrimeMovers.HY,
    "HYDRO": PrimeMovers.HY,
    "PV": PrimeMovers.PVe,
    "PVE": PrimeMovers.PVe,
    "WT": PrimeMovers.WT,
    "WIND": PrimeMovers.WT,
}

HYDRO_FUELS = {"HYDRO"}
RENEWABLE_FUELS = {"SOLAR", "WIND"}


def parse_thermal_fuel(value: str | None) -> ThermalFuels:
    """Map a fuel string from an input file to ThermalFuels; unknown fuels map to OTHER."""
    if value is None:
        return ThermalFuels.OTHER
    return _THERMAL_FUELS.get(value.strip().upper(), ThermalFuels.OTHER)


def parse_prime_mover(value: str | None) -> PrimeMovers:
    """Map a unit type string from an input file to PrimeMovers; unknown types map to OT."""
    if value is None:
        return PrimeMovers.OT
    return _PRIME_MOVERS.get(value.strip().upper(), PrimeMovers.OT)


def calculate_rating(active_power_max: float, reactive_power_max: float | None) -> float:
    """Return the apparent power rating implied by the active and reactive maximums."""
    return math.hypot(active_power_max, reactive_power_max or 0.0)
