import unittest
from dose_engine import VetDoseEngine, calculate_dose
from safety import HIGH_RISK_ADVISORY
from constants import Species
from models import (
    CalculationInput,
    DosingRule,
    Formulation,
    SafetyLevel,
    WeightUnit,
    WeightValue,
)

class TestClinicalScenarios(unittest.TestCase):
    """
    End-to-end patient cases through the full pipeline.
    Run with: python -m unittest test_clinical_scenarios.py
    """

    def setUp(self):
        # Amoxicillin-like rule: 10-25 mg/kg, no ceiling
        self.standard_rule = DosingRule(
            dose_low=10, dose_high=25, dose_unit="mg/kg",
            is_high_risk=False, mdr1_sensitive=False
        )

    def create_input(self, species=Species.CANINE, weight=10.0, unit=WeightUnit.KG,
                     rule=None, **kwargs):
        return CalculationInput(
            species=species,
            weight=WeightValue(weight, unit),
            rule=rule or self.standard_rule,
            **kwargs
        )

    # --- REFERENCE CASES ---

    def test_01_standard_dog(self):
        """10 kg dog, low rate: 100 mg, range 100-250, safe, no warnings."""
        print("\nTEST 1: Standard Dog")
        res = calculate_dose(self.create_input())

        print(f"Dose: {res.dose} {res.dose_unit} [{res.safety_level.value}]")
        self.assertEqual(res.dose, 100.0)
        self.assertEqual(res.dose_unit, "mg")
        self.assertEqual((res.dose_range.low, res.dose_range.high), (100.0, 250.0))
        self.assertEqual(res.safety_level, SafetyLevel.SAFE)
        self.assertEqual(res.warnings, ())
        self.assertEqual(res.adjustments, ())
        self.assertTrue(res.is_valid)
        self.assertFalse(res.requires_acknowledgement)
        self.assertIsNone(res.volume)

    def test_02_obese_cat_in_pounds(self):
        """4 lbs cat, BCS 9, high rate: 1.814 kg -> 1.361 kg lean -> ~34.02 mg."""
        print("\nTEST 2: Obese Cat (lbs)")
        res = calculate_dose(self.create_input(
            species=Species.FELINE, weight=4.0, unit=WeightUnit.LBS, bcs=9, use_high_dose=True
        ))

        print(f"Weight: {res.weight_kg:.3f} kg -> Effective: {res.effective_weight_kg:.3f} kg")
        print(f"Dose: {res.dose:.2f} {res.dose_unit}")
        self.assertAlmostEqual(res.weight_kg, 1.814, places=3)
        self.assertAlmostEqual(res.effective_weight_kg, 1.361, places=3)
        self.assertAlmostEqual(res.dose, 34.02, delta=0.02)
        self.assertEqual(res.to_dict()["dose"], 34.02)
        self.assertEqual(res.safety_level, SafetyLevel.SAFE)
        self.assertTrue(any("-25%" in a for a in res.adjustments))
        # Small cat: weight advisory is a note, never a warning
        self.assertEqual(res.warnings, ())
        self.assertTrue(any("typical Feline range" in n for n in res.notes))

    def test_03_border_collie_ivermectin(self):
        """MDR1 advisory fires for a sensitive drug, independent of dose."""
        print("\nTEST 3: Border Collie + MDR1-sensitive drug")
        rule = DosingRule(dose_low=0.006, dose_high=0.012, drug_name="Ivermectin", mdr1_sensitive=True)
        res = calculate_dose(self.create_input(rule=rule, weight=18.0, breed="Border Collie"))

        for w in res.warnings:
            print(f" > {w}")
        self.assertTrue(any("MDR1" in w for w in res.warnings))
        self.assertEqual(res.dose, 18.0 * 0.006)
        # Warning escalates an in-range dose
        self.assertEqual(res.safety_level, SafetyLevel.CAUTION)
        self.assertTrue(res.requires_acknowledgement)

    # --- PROPERTIES ---

    def test_04_linear_species_are_exact(self):
        """Dogs and cats at BCS 5: dose == weight x rate, no scaling."""
        rate = 7.3
        rule = DosingRule(dose_low=rate, dose_high=rate * 2)
        for species in (Species.CANINE, Species.FELINE):
            for weight in (0.5, 3.3, 12.7, 45.0):
                res = calculate_dose(self.create_input(species=species, weight=weight, rule=rule, bcs=5))
                self.assertEqual(res.dose, weight * rate)
                self.assertEqual(res.adjustments, ())

    def test_05_bcs_propagates_into_dose(self):
        ideal = calculate_dose(self.create_input(weight=30.0, bcs=5))
        obese = calculate_dose(self.create_input(weight=30.0, bcs=9))
        self.assertAlmostEqual(obese.effective_weight_kg, 0.75 * 30.0)
        self.assertAlmostEqual(obese.dose, 0.75 * ideal.dose)
        self.assertLess(obese.dose, ideal.dose)

    def test_06_monotonic_in_weight(self):
        """Heavier never means less drug, for every species."""
        rule = DosingRule(dose_low=2, dose_high=4, max_dose=600)
        weights = [0.02, 0.1, 0.5, 1.0, 5.0, 10.0, 50.0, 200.0, 600.0]
        for species in Species:
            doses = [
                calculate_dose(self.create_input(species=species, weight=w, rule=rule,
                                                 bcs=7, temperature_c=28.0)).dose
                for w in weights
            ]
            for lighter, heavier in zip(doses, doses[1:]):
                self.assertLessEqual(lighter, heavier, f"{species.value}: {doses}")

    def test_07_idempotent(self):
        """Same input, same output. No hidden state."""
        data = self.create_input(
            species=Species.REPTILE, weight=2.5, bcs=7, breed="Ball Python",
            temperature_c=22.0, formulation=Formulation("Injectable", 22.7, "mg/ml")
        )
        first = calculate_dose(data)
        second = calculate_dose(data)
        self.assertEqual(first, second)
        self.assertEqual(first.to_dict(), second.to_dict())

    def test_08_ceiling_clamp(self):
        """Natural dose 400 mg, ceiling 300 mg: exactly 300 with a cap notice."""
        rule = DosingRule(dose_low=10, dose_high=25, max_dose=300)
        res = calculate_dose(self.create_input(weight=40.0, rule=rule))

        self.assertEqual(res.dose, 300.0)
        self.assertIn("Dose capped at maximum: 300 mg", res.warnings)
        self.assertEqual(res.safety_level, SafetyLevel.CAUTION)

    def test_09_unexplained_danger_is_invalid(self):
        """
        A 10 kg bird on a dog rate scales to 10x the range with no
        warning to show for it; the result must flag itself.
        """
        res = calculate_dose(self.create_input(species=Species.AVIAN, weight=10.0))

        self.assertAlmostEqual(res.dose, 1000.0)
        self.assertEqual(res.safety_level, SafetyLevel.DANGER)
        self.assertEqual(res.warnings, ())
        self.assertFalse(res.is_valid)

    def test_10_liquid_volume_round_trip(self):
        formulation = Formulation(form="Injectable", concentration=50.0, concentration_unit="mg/ml")
        for weight in (1.3, 7.9, 33.3):
            res = calculate_dose(self.create_input(weight=weight, formulation=formulation))
            self.assertEqual(res.volume_unit, "ml")
            self.assertAlmostEqual(res.volume * 50.0, res.dose, places=9)

    # --- SPECIES & FORMULATION CASES ---

    def test_11_cool_reptile(self):
        """2 kg reptile at 22C: allometric x5, then cool x0.75."""
        print("\nTEST 11: Reptile at 22C")
        res = calculate_dose(self.create_input(species=Species.REPTILE, weight=2.0, temperature_c=22.0))

        expected = 2.0 * 10 * ((2.0 / 10.0) ** 0.75) * 5.0 * 0.75
        print(f"Dose: {res.dose:.3f} mg (expected {expected:.3f})")
        self.assertAlmostEqual(res.dose, expected)
        self.assertEqual(len(res.adjustments), 2)
        self.assertIn("cool", res.adjustments[1])

    def test_12_temperature_ignored_for_mammals(self):
        res = calculate_dose(self.create_input(temperature_c=15.0))
        self.assertEqual(res.dose, 100.0)
        self.assertEqual(res.adjustments, ())
        self.assertTrue(any("ignored" in n for n in res.notes))

    def test_13_large_animal_linear(self):
        res = calculate_dose(self.create_input(species=Species.EQUINE, weight=450.0))
        self.assertEqual(res.dose, 4500.0)
        self.assertEqual(res.notes, ())

    def test_14_high_risk_drug(self):
        """High risk alone is caution; with a patient warning it is danger."""
        rule = DosingRule(dose_low=0.05, dose_high=0.1, drug_name="Acepromazine",
                          is_high_risk=True, mdr1_sensitive=True)

        plain = calculate_dose(self.create_input(rule=rule, breed="Labrador"))
        self.assertEqual(plain.safety_level, SafetyLevel.CAUTION)
        self.assertEqual(plain.warnings, (HIGH_RISK_ADVISORY,))

        collie = calculate_dose(self.create_input(rule=rule, breed="Rough Collie"))
        self.assertEqual(collie.safety_level, SafetyLevel.DANGER)
        self.assertTrue(collie.is_valid)
        self.assertEqual(collie.warnings[-1], HIGH_RISK_ADVISORY)

    def test_15_boxer_acepromazine(self):
        rule = DosingRule(dose_low=0.01, dose_high=0.03, drug_name="Acepromazine")
        res = calculate_dose(self.create_input(rule=rule, weight=30.0, breed="boxer"))
        self.assertTrue(any(w.startswith("BREED WARNING") for w in res.warnings))
        self.assertEqual(res.safety_level, SafetyLevel.CAUTION)

    def test_16_tablets(self):
        formulation = Formulation(form="Tablet", concentration=40.0, concentration_unit="mg/tablet")
        res = calculate_dose(self.create_input(formulation=formulation))
        self.assertEqual((res.volume, res.volume_unit), (2.5, "tablets"))

    def test_17_unsupported_concentration(self):
        """CRI-style units are not converted, and the result says so."""
        formulation = Formulation(form="Injectable", concentration=500.0, concentration_unit="mcg/ml")
        res = calculate_dose(self.create_input(formulation=formulation))
        self.assertIsNone(res.volume)
        self.assertIsNone(res.volume_unit)
        self.assertTrue(any("unsupported concentration unit 'mcg/ml'" in n for n in res.notes))

    def test_18_rate_units(self):
        rule = DosingRule(dose_low=2, dose_high=10, dose_unit="mcg/kg/min")
        res = calculate_dose(self.create_input(rule=rule))
        self.assertEqual(res.dose_unit, "mcg/min")
        self.assertEqual(res.dose, 20.0)

    def test_19_class_and_module_entry_points_agree(self):
        data = self.create_input(weight=12.0)
        self.assertEqual(VetDoseEngine.calculate_dose(data), calculate_dose(data))

    def test_20_dose_below_quarter_tablet(self):
        """0.4 kg kitten, 4 mg dose vs 40 mg tablets: never report 0 tablets."""
        print("\nTEST 20: Sub-quarter tablet")
        formulation = Formulation(form="Tablet", concentration=40.0, concentration_unit="mg/tablet")
        res = calculate_dose(self.create_input(species=Species.FELINE, weight=0.4, formulation=formulation))

        print(f"Dose: {res.dose:.2f} mg -> {res.volume} {res.volume_unit}")
        self.assertAlmostEqual(res.dose, 4.0)
        self.assertIsNone(res.volume)
        self.assertIsNone(res.volume_unit)
        self.assertIn("Dose below a quarter tablet: use a liquid formulation", res.notes)

        # Same patient on a liquid still gets a volume
        liquid = Formulation(form="Suspension", concentration=50.0, concentration_unit="mg/ml")
        res = calculate_dose(self.create_input(species=Species.FELINE, weight=0.4, formulation=liquid))
        self.assertAlmostEqual(res.volume, 0.08)
        self.assertEqual(res.volume_unit, "ml")

if __name__ == '__main__':
    unittest.main()
