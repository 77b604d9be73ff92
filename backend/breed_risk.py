# breed_risk.py
from typing import Optional
from constants import BREED_LIBRARY, Species

class BreedRiskChecker:
    """
    Advisory breed checks. Matching is case-insensitive substring matching
    on the free-text breed (no canonical breed registry), so crosses such as
    "Border Collie x Lab" are caught. Never changes the dose.
    """
    @staticmethod
    def check_transporter_sensitivity(breed: Optional[str],
                                      drug_is_sensitive: bool) -> Optional[str]:
        if not breed or not drug_is_sensitive:
            return None

        lower_breed = breed.lower()
        if any(keyword in lower_breed for keyword in BREED_LIBRARY.MDR1_BREEDS):
            return (
                f"MDR1 MUTATION WARNING: {breed} may carry the MDR1 mutation. "
                "Consider genetic testing. Reduce dose by 25-50% or use alternative drug."
            )
        return None

    @staticmethod
    def check_breed_warnings(breed: Optional[str],
                             drug_name: Optional[str],
                             species: Optional[Species] = None) -> Optional[str]:
        if not breed or not drug_name:
            return None

        lower_breed = breed.lower()
        lower_drug = drug_name.lower()

        for entry in BREED_LIBRARY.SENSITIVITIES:
            if species is not None and entry.species is not species:
                continue
            if entry.keyword not in lower_breed:
                continue
            if any(drug in lower_drug for drug in entry.drugs):
                return (
                    f"BREED WARNING: {breed} may have sensitivity to {drug_name} "
                    f"({entry.risk_type.value}: {entry.description})"
                )
        return None
