# formulation.py
import math
from typing import Optional
from constants import UNIT_CONSTANTS
from models import VolumeResult

class FormulationConverter:
    """Turns a mass dose into something a technician can draw up or count out."""

    SUPPORTED_UNITS = ("mg/ml", "mg/tablet")

    @staticmethod
    def normalize_unit(concentration_unit: str) -> str:
        return concentration_unit.strip().lower().replace(" ", "")

    @staticmethod
    def is_supported(concentration_unit: Optional[str]) -> bool:
        if not concentration_unit:
            return False
        return FormulationConverter.normalize_unit(concentration_unit) in FormulationConverter.SUPPORTED_UNITS

    @staticmethod
    def calculate_volume(dose: float,
                         concentration: Optional[float] = None,
                         concentration_unit: Optional[str] = None) -> Optional[VolumeResult]:
        if not concentration or not concentration_unit:
            return None

        unit = FormulationConverter.normalize_unit(concentration_unit)

        # Liquids: draw up exactly
        if unit == "mg/ml":
            return VolumeResult(volume=dose / concentration, unit="ml")

        # Solids: nearest quarter tablet
        if unit == "mg/tablet":
            fraction = UNIT_CONSTANTS.TABLET_FRACTION
            # Half-up, so 0.625 tablets -> 0.75
            tablets = math.floor((dose / concentration) * fraction + 0.5) / fraction
            return VolumeResult(volume=tablets, unit="tablets")

        # CRI rates, IU, mg/capsule etc. are not converted
        return None
