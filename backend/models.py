"""
VetDose: Data Dictionary
========================
Immutable value records flowing through the dosing engine:
Inputs (patient + dosing rule), intermediate results, and the final
CalculationResult handed back to the caller for display or audit.

Preconditions are enforced at construction time. A record that exists
is a record the engine can compute on without failing.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple
from constants import BCS_CONSTANTS, VERSION, Species

class DoseValidationError(ValueError):
    """Base class for inputs the engine refuses to compute on."""
    pass

class InvalidWeight(DoseValidationError):
    """Weight is not a finite positive number, or its unit is unknown."""
    pass

class InvalidDoseRange(DoseValidationError):
    """Dosing bounds are not positive, inverted, or the ceiling is not positive."""
    pass

class UnknownSpecies(DoseValidationError):
    """Species is outside the supported set."""
    pass

class InvalidBodyConditionScore(DoseValidationError):
    """BCS must be an integer on the 1-9 scale."""
    pass

class InvalidFormulation(DoseValidationError):
    """Formulation concentration must be positive."""
    pass

class DataTypeError(TypeError):
    """Raised when inputs are wrong python types (str instead of float)."""
    pass

def _require_number(name: str, value, error=DoseValidationError) -> float:
    # bool is an int subclass; True is not a weight
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DataTypeError(f"Field '{name}' must be numeric, got {type(value)}")
    # NaN and inf get past the comparison-based range checks below
    if not math.isfinite(value):
        raise error(f"Field '{name}' must be a finite number (got {value})")
    return float(value)

# --- 1. ENUMS ---

class WeightUnit(Enum):
    KG = "kg"
    LBS = "lbs"

class SafetyLevel(Enum):
    SAFE = "safe"
    CAUTION = "caution"
    DANGER = "danger"

def coerce_species(value) -> Species:
    if isinstance(value, Species):
        return value
    try:
        return Species(str(value).strip().lower())
    except ValueError:
        raise UnknownSpecies(
            f"Unknown species: {value!r}. Valid: {[s.value for s in Species]}"
        )

# --- 2. INPUT LAYER ---

@dataclass(frozen=True)
class WeightValue:
    amount: float
    unit: WeightUnit = WeightUnit.KG

    def __post_init__(self):
        amount = _require_number("weight", self.amount, InvalidWeight)
        if not amount > 0:
            raise InvalidWeight(f"Weight must be > 0 (got {self.amount})")

        unit = self.unit
        if not isinstance(unit, WeightUnit):
            raw = str(unit).strip().lower()
            if raw == "lb":
                raw = "lbs"
            try:
                unit = WeightUnit(raw)
            except ValueError:
                raise InvalidWeight(f"Unknown weight unit: {self.unit!r}")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "unit", unit)

@dataclass(frozen=True)
class DosingRule:
    """
    One species/indication dosing entry for a drug, as supplied by the
    drug database. Rates are per kilogram; max_dose is absolute.
    """
    dose_low: float
    dose_high: float
    dose_unit: str = "mg/kg"
    max_dose: Optional[float] = None
    is_high_risk: bool = False
    mdr1_sensitive: bool = False

    # Context (breed check + audit record)
    drug_name: Optional[str] = None
    indication: Optional[str] = None
    route: Optional[str] = None

    def __post_init__(self):
        low = _require_number("dose_low", self.dose_low, InvalidDoseRange)
        high = _require_number("dose_high", self.dose_high, InvalidDoseRange)
        if low <= 0 or high <= 0:
            raise InvalidDoseRange(f"Dose bounds must be > 0 (got {low}-{high})")
        if high < low:
            raise InvalidDoseRange(f"dose_high ({high}) must be >= dose_low ({low})")
        object.__setattr__(self, "dose_low", low)
        object.__setattr__(self, "dose_high", high)

        if self.max_dose is not None:
            ceiling = _require_number("max_dose", self.max_dose, InvalidDoseRange)
            if ceiling <= 0:
                raise InvalidDoseRange(f"max_dose must be > 0 (got {ceiling})")
            object.__setattr__(self, "max_dose", ceiling)

    @property
    def absolute_unit(self) -> str:
        """'mg/kg' -> 'mg', 'mcg/kg/min' -> 'mcg/min'."""
        return self.dose_unit.replace("/kg", "")

@dataclass(frozen=True)
class Formulation:
    form: str
    concentration: float
    concentration_unit: str = "mg/ml"

    def __post_init__(self):
        concentration = _require_number("concentration", self.concentration, InvalidFormulation)
        if concentration <= 0:
            raise InvalidFormulation(f"Concentration must be > 0 (got {concentration})")
        object.__setattr__(self, "concentration", concentration)

@dataclass(frozen=True)
class CalculationInput:
    """
    Everything the engine needs for one calculation.
    Assembled by the form layer, consumed once.
    """
    species: Species
    weight: WeightValue
    rule: DosingRule
    bcs: Optional[int] = None
    formulation: Optional[Formulation] = None
    breed: Optional[str] = None
    temperature_c: Optional[float] = None  # Ectotherms only
    use_high_dose: bool = False

    def __post_init__(self):
        object.__setattr__(self, "species", coerce_species(self.species))

        if self.bcs is not None:
            if isinstance(self.bcs, bool) or not isinstance(self.bcs, int):
                raise InvalidBodyConditionScore(f"BCS must be an integer, got {self.bcs!r}")
            if not (BCS_CONSTANTS.MIN_SCORE <= self.bcs <= BCS_CONSTANTS.MAX_SCORE):
                raise InvalidBodyConditionScore(f"BCS must be 1-9 (got {self.bcs})")

        if self.temperature_c is not None:
            object.__setattr__(
                self, "temperature_c", _require_number("temperature_c", self.temperature_c)
            )

        if self.breed is not None:
            breed = str(self.breed).strip()
            object.__setattr__(self, "breed", breed or None)

# --- 3. INTERMEDIATE RESULTS ---

@dataclass(frozen=True)
class DoseRange:
    low: float
    high: float

@dataclass(frozen=True)
class VolumeResult:
    volume: float
    unit: str  # "ml" or "tablets"

@dataclass(frozen=True)
class DoseResolution:
    """Output of the dose resolver: the dose plus what happened to it."""
    dose: float
    adjustments: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

@dataclass(frozen=True)
class QuickDoseCheck:
    dose: float
    exceeds_max: bool

# --- 4. OUTPUT LAYER ---

@dataclass(frozen=True)
class CalculationResult:
    """
    The final, immutable answer. Values are unrounded;
    use to_dict() for the rounded display/audit rendering.
    """
    dose: float
    dose_unit: str
    dose_range: DoseRange
    safety_level: SafetyLevel
    is_valid: bool
    weight_kg: float
    effective_weight_kg: float
    volume: Optional[float] = None
    volume_unit: Optional[str] = None
    warnings: Tuple[str, ...] = ()
    adjustments: Tuple[str, ...] = ()
    notes: Tuple[str, ...] = ()
    engine_version: str = field(default=VERSION)

    @property
    def requires_acknowledgement(self) -> bool:
        """The UI must gate confirmation on anything other than 'safe'."""
        return self.safety_level is not SafetyLevel.SAFE

    def to_dict(self, precision: int = 2) -> dict:
        def _r(value):
            return None if value is None else round(value, precision)

        return {
            "dose": _r(self.dose),
            "dose_unit": self.dose_unit,
            "dose_range": {
                "low": _r(self.dose_range.low),
                "high": _r(self.dose_range.high),
            },
            "volume": _r(self.volume),
            "volume_unit": self.volume_unit,
            "safety_level": self.safety_level.value,
            "warnings": list(self.warnings),
            "adjustments": list(self.adjustments),
            "notes": list(self.notes),
            "is_valid": self.is_valid,
            "weight_kg": _r(self.weight_kg),
            "effective_weight_kg": _r(self.effective_weight_kg),
            "engine_version": self.engine_version,
        }
