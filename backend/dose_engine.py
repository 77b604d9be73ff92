"""
VetDose: Dose Calculation Engine
================================
Turns patient + dosing rule into an administrable dose.

Pipeline (strict order, each step pure):
  weight normalization -> BCS adjustment -> dose resolution
  (rate x weight -> allometric scaling -> temperature -> ceiling clamp)
  -> breed checks -> safety classification -> formulation volume
"""

import logging
from typing import Optional, Tuple

from constants import (
    ALLOMETRIC_CONSTANTS,
    BCS_CONSTANTS,
    SPECIES_LIBRARY,
    TEMPERATURE_BUCKETS,
    UNIT_CONSTANTS,
    Species,
)
from models import (
    CalculationInput,
    CalculationResult,
    DoseRange,
    DoseResolution,
    DosingRule,
    QuickDoseCheck,
    WeightUnit,
)
from safety import HIGH_RISK_ADVISORY, SafetyClassifier
from breed_risk import BreedRiskChecker
from formulation import FormulationConverter

logger = logging.getLogger(__name__)

class VetDoseEngine:
    """
    The Mathematical Core.
    Stateless: every method is a pure function of its arguments.
    """

    @staticmethod
    def normalize_weight(amount: float, unit: WeightUnit) -> float:
        """Canonical kilograms."""
        if unit is WeightUnit.LBS:
            return amount / UNIT_CONSTANTS.LBS_PER_KG
        return amount

    @staticmethod
    def adjust_for_bcs(weight_kg: float, bcs: Optional[int] = None) -> Tuple[float, Optional[str]]:
        """
        Effective (lean) weight from body condition.
        Underweight and ideal patients are dosed on actual weight.
        """
        if bcs is None or bcs == BCS_CONSTANTS.IDEAL_SCORE:
            return weight_kg, None

        for lowest_score, factor, note in BCS_CONSTANTS.BANDS:
            if bcs >= lowest_score:
                return weight_kg * factor, note

        return weight_kg, None

    @staticmethod
    def apply_allometric_scaling(base_dose: float,
                                 effective_weight_kg: float,
                                 species: Species) -> Tuple[float, Optional[str]]:
        """
        Metabolic rate scales with mass^0.75, not mass.
        Dose = BaseDose x (W / W_ref)^0.75 x k  for avian, reptile, exotic.
        Dogs and cats are the reference; large animals stay linear.
        """
        factor = SPECIES_LIBRARY.get(species).allometric_factor
        if factor is None:
            return base_dose, None

        ratio = effective_weight_kg / ALLOMETRIC_CONSTANTS.REFERENCE_WEIGHT_KG
        scaled_dose = base_dose * (ratio ** ALLOMETRIC_CONSTANTS.EXPONENT) * factor
        return scaled_dose, f"Allometric scaling applied for {species.value} (factor: {factor})"

    @staticmethod
    def apply_temperature_adjustment(dose: float,
                                     temperature_c: Optional[float] = None) -> Tuple[float, Optional[str]]:
        """Ectotherm metabolism tracks ambient temperature."""
        if temperature_c is None:
            return dose, None

        bucket, factor = TEMPERATURE_BUCKETS.classify(temperature_c)
        return (
            dose * factor,
            f"Temperature adjustment: {bucket} ({temperature_c:g}°C, factor: {factor})",
        )

    @staticmethod
    def resolve_dose(effective_weight_kg: float,
                     rule: DosingRule,
                     use_high_dose: bool,
                     species: Species,
                     temperature_c: Optional[float] = None) -> DoseResolution:
        """
        Rate x weight, folded through the species adjustment steps,
        then clamped to the absolute ceiling. Clamping never fails,
        it only annotates.
        """
        rate = rule.dose_high if use_high_dose else rule.dose_low
        dose = effective_weight_kg * rate

        steps = [
            lambda d: VetDoseEngine.apply_allometric_scaling(d, effective_weight_kg, species),
        ]
        if species is Species.REPTILE:
            steps.append(lambda d: VetDoseEngine.apply_temperature_adjustment(d, temperature_c))

        adjustments = []
        for step in steps:
            dose, note = step(dose)
            if note:
                adjustments.append(note)
                logger.debug(f"{note} -> {dose:.4f}")

        warnings = []
        if rule.max_dose is not None and dose > rule.max_dose:
            logger.debug(f"Clamping {dose:.4f} to ceiling {rule.max_dose}")
            warnings.append(f"Dose capped at maximum: {rule.max_dose:g} {rule.absolute_unit}")
            dose = rule.max_dose

        return DoseResolution(dose=dose, adjustments=tuple(adjustments), warnings=tuple(warnings))

    @staticmethod
    def quick_dose_check(weight_kg: float, dose_rate: float,
                         max_dose: Optional[float] = None) -> QuickDoseCheck:
        """At-a-glance linear check, no scaling or BCS."""
        dose = weight_kg * dose_rate
        return QuickDoseCheck(
            dose=dose,
            exceeds_max=max_dose is not None and dose > max_dose,
        )

    @staticmethod
    def calculate_dose(data: CalculationInput) -> CalculationResult:
        """
        Single entry point for collaborators.
        Never raises for a constructed CalculationInput; problems come back
        as data (safety level, warnings, is_valid).
        """
        rule = data.rule
        species = data.species
        profile = SPECIES_LIBRARY.get(species)
        notes = []

        # 1. Weight
        weight_kg = VetDoseEngine.normalize_weight(data.weight.amount, data.weight.unit)
        if not (profile.min_weight_kg <= weight_kg <= profile.max_weight_kg):
            notes.append(
                f"Weight {weight_kg:.2f} kg is outside the typical {profile.name} range "
                f"({profile.min_weight_kg:g}-{profile.max_weight_kg:g} kg). Verify weight."
            )

        # 2. Body condition
        effective_weight_kg, bcs_note = VetDoseEngine.adjust_for_bcs(weight_kg, data.bcs)
        adjustments = [bcs_note] if bcs_note else []

        if data.temperature_c is not None and species is not Species.REPTILE:
            notes.append(
                f"Temperature {data.temperature_c:g}°C ignored: "
                "temperature scaling applies to reptiles only"
            )

        # 3. Dose
        resolution = VetDoseEngine.resolve_dose(
            effective_weight_kg, rule, data.use_high_dose, species, data.temperature_c
        )
        dose = resolution.dose
        adjustments.extend(resolution.adjustments)
        warnings = list(resolution.warnings)

        # 4. Breed (advisory only)
        mdr1_warning = BreedRiskChecker.check_transporter_sensitivity(data.breed, rule.mdr1_sensitive)
        if mdr1_warning:
            warnings.append(mdr1_warning)

        breed_warning = BreedRiskChecker.check_breed_warnings(data.breed, rule.drug_name, species)
        if breed_warning:
            warnings.append(breed_warning)

        # 5. Safety
        dose_range = DoseRange(
            low=effective_weight_kg * rule.dose_low,
            high=effective_weight_kg * rule.dose_high,
        )
        safety_level = SafetyClassifier.determine_safety_level(
            dose,
            dose_range.low,
            dose_range.high,
            rule.max_dose,
            rule.is_high_risk,
            has_warnings=len(warnings) > 0,
        )
        # Appended after classification: rule 4 already accounts for high risk
        if rule.is_high_risk:
            warnings.append(HIGH_RISK_ADVISORY)

        # 6. Formulation
        volume = None
        if data.formulation is not None:
            concentration_unit = data.formulation.concentration_unit
            if not FormulationConverter.is_supported(concentration_unit):
                notes.append(
                    f"Volume not calculated: unsupported concentration unit '{concentration_unit}'"
                )
            else:
                volume = FormulationConverter.calculate_volume(
                    dose, data.formulation.concentration, concentration_unit
                )
                # Zero tablets for a real dose reads as "give nothing"
                if volume is not None and volume.volume == 0 and dose > 0:
                    logger.debug(f"{dose:.4f} {rule.absolute_unit} rounds to 0 tablets")
                    notes.append("Dose below a quarter tablet: use a liquid formulation")
                    volume = None

        logger.info(
            f"{species.value} {weight_kg:.3f}kg -> {dose:.4f} {rule.absolute_unit} "
            f"[{safety_level.value}, {len(warnings)} warnings]"
        )

        return CalculationResult(
            dose=dose,
            dose_unit=rule.absolute_unit,
            dose_range=dose_range,
            safety_level=safety_level,
            is_valid=SafetyClassifier.is_valid(safety_level, warnings),
            weight_kg=weight_kg,
            effective_weight_kg=effective_weight_kg,
            volume=volume.volume if volume else None,
            volume_unit=volume.unit if volume else None,
            warnings=tuple(warnings),
            adjustments=tuple(adjustments),
            notes=tuple(notes),
        )

calculate_dose = VetDoseEngine.calculate_dose
