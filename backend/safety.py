# safety.py
import logging
from typing import Optional, Sequence
from constants import SAFETY_THRESHOLDS
from models import SafetyLevel

logger = logging.getLogger(__name__)

HIGH_RISK_ADVISORY = "HIGH-RISK DRUG: Double-check dose and monitor patient closely"

class SafetyClassifier:
    """
    Clinical risk classification of a resolved dose.
    Compares against the therapeutic range scaled to the patient's
    effective weight, never against the per-kg rule.
    """
    @staticmethod
    def determine_safety_level(calculated_dose: float,
                               dose_low_abs: float,
                               dose_high_abs: float,
                               max_dose: Optional[float] = None,
                               is_high_risk: bool = False,
                               has_warnings: bool = False) -> SafetyLevel:
        # First match wins

        # 1. Absolute ceiling breached
        if max_dose is not None and calculated_dose > max_dose:
            return SafetyLevel.DANGER

        # 2. Grossly above the therapeutic range
        if calculated_dose > dose_high_abs * SAFETY_THRESHOLDS.DANGER_MULTIPLIER:
            return SafetyLevel.DANGER

        # 3. Marginally above the therapeutic range
        if calculated_dose > dose_high_abs * SAFETY_THRESHOLDS.CAUTION_MULTIPLIER:
            return SafetyLevel.CAUTION

        # 4. High-risk drugs are never plain 'safe'
        if is_high_risk:
            return SafetyLevel.DANGER if has_warnings else SafetyLevel.CAUTION

        # 5. In range
        return SafetyLevel.CAUTION if has_warnings else SafetyLevel.SAFE

    @staticmethod
    def is_valid(level: SafetyLevel, warnings: Sequence[str]) -> bool:
        """A dangerous result must always explain why."""
        valid = level is not SafetyLevel.DANGER or len(warnings) > 0
        if not valid:
            logger.error("Inconsistent result: DANGER classification without any warning")
        return valid
