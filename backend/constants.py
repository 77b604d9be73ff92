from enum import Enum
from dataclasses import dataclass
from typing import Optional, Tuple
VERSION = "1.0.0"

class Species(Enum):
    CANINE = "canine"
    FELINE = "feline"
    EQUINE = "equine"
    BOVINE = "bovine"
    AVIAN = "avian"
    REPTILE = "reptile"
    EXOTIC = "exotic"   # Small mammals: rabbits, ferrets, rodents

class DosingMethod(Enum):
    STANDARD = "standard"                     # Linear mg/kg
    ALLOMETRIC = "allometric"                 # mass^0.75
    SURFACE_AREA = "surface_area"             # mass^0.75, high metabolic rate
    TEMPERATURE_DEPENDENT = "temperature_dependent"  # Ectotherms

class BreedRiskType(Enum):
    MDR1 = "mdr1"
    BRACHYCEPHALIC = "brachycephalic"
    CARDIAC = "cardiac"
    METABOLIC = "metabolic"

@dataclass(frozen=True)
class SpeciesProfile:
    name: str
    min_weight_kg: float
    max_weight_kg: float
    dosing_method: DosingMethod
    # None = linear mg/kg dosing (reference case)
    allometric_factor: Optional[float] = None

@dataclass(frozen=True)
class BreedSensitivity:
    keyword: str                # Lower-case substring of the free-text breed
    species: Species
    risk_type: BreedRiskType
    drugs: Tuple[str, ...]      # Lower-case substrings of the drug name
    description: str

class UNIT_CONSTANTS:
    LBS_PER_KG = 2.20462
    TABLET_FRACTION = 4  # Tablets are dispensed in quarters

class BCS_CONSTANTS:
    MIN_SCORE = 1
    MAX_SCORE = 9
    IDEAL_SCORE = 5

    # (Lowest score in band, weight factor, note). Highest band first.
    # Clearance follows lean mass, so fat mass is discounted.
    BANDS = (
        (8, 0.75, "Weight adjusted by -25% for obesity (BCS 8-9)"),
        (6, 0.90, "Weight adjusted by -10% for overweight (BCS 6-7)"),
    )

class ALLOMETRIC_CONSTANTS:
    REFERENCE_WEIGHT_KG = 10.0  # Standard reference-size dog
    EXPONENT = 0.75             # Metabolic rate ~ mass^0.75

class TEMPERATURE_BUCKETS:
    """
    Ectotherm metabolic scaling.
    (Lower bound in Celsius, inclusive; bucket; dose factor). Ascending.
    """
    BUCKETS = (
        (float("-inf"), "cold", 0.5),   # <20C: half metabolism
        (20.0, "cool", 0.75),
        (25.0, "optimal", 1.0),
        (30.0, "warm", 1.25),
        (35.0, "hot", 1.5),
    )

    @staticmethod
    def classify(temperature_c: float) -> Tuple[str, float]:
        bucket, factor = TEMPERATURE_BUCKETS.BUCKETS[0][1:]
        for lower_bound, name, bucket_factor in TEMPERATURE_BUCKETS.BUCKETS:
            if temperature_c >= lower_bound:
                bucket, factor = name, bucket_factor
        return bucket, factor

class SAFETY_THRESHOLDS:
    # Multipliers of the absolute therapeutic high bound
    DANGER_MULTIPLIER = 1.5
    CAUTION_MULTIPLIER = 1.1

class SPECIES_LIBRARY:
    """
    Reference profile for every supported species.
    Weight ranges are typical adult ranges, used for advisory notes only.
    """
    SPECS = {
        Species.CANINE: SpeciesProfile(
            name="Canine", min_weight_kg=1.0, max_weight_kg=90.0,
            dosing_method=DosingMethod.STANDARD
        ),
        Species.FELINE: SpeciesProfile(
            name="Feline", min_weight_kg=2.0, max_weight_kg=10.0,
            dosing_method=DosingMethod.STANDARD
        ),
        # Large animals: linear dosing in this model
        Species.EQUINE: SpeciesProfile(
            name="Equine", min_weight_kg=150.0, max_weight_kg=800.0,
            dosing_method=DosingMethod.STANDARD
        ),
        Species.BOVINE: SpeciesProfile(
            name="Bovine", min_weight_kg=200.0, max_weight_kg=1000.0,
            dosing_method=DosingMethod.STANDARD
        ),
        Species.AVIAN: SpeciesProfile(
            name="Avian", min_weight_kg=0.02, max_weight_kg=5.0,
            dosing_method=DosingMethod.SURFACE_AREA,
            allometric_factor=10.0
        ),
        Species.REPTILE: SpeciesProfile(
            name="Reptile", min_weight_kg=0.05, max_weight_kg=50.0,
            dosing_method=DosingMethod.TEMPERATURE_DEPENDENT,
            allometric_factor=5.0
        ),
        Species.EXOTIC: SpeciesProfile(
            name="Exotic", min_weight_kg=0.01, max_weight_kg=10.0,
            dosing_method=DosingMethod.ALLOMETRIC,
            allometric_factor=3.0
        ),
    }

    @staticmethod
    def get(species: Species) -> SpeciesProfile:
        return SPECIES_LIBRARY.SPECS[species]

class BREED_LIBRARY:
    """
    Known genetic drug sensitivities, matched as lower-case substrings
    of the free-text breed entered at the bedside.
    """
    # ABCB1 (MDR1) transporter mutation carriers
    MDR1_BREEDS = (
        "collie", "rough collie", "smooth collie", "border collie",
        "australian shepherd", "aussie",
        "shetland sheepdog", "sheltie",
        "old english sheepdog",
        "english shepherd",
        "german shepherd",
        "longhaired whippet",
        "silken windhound",
        "mcnab",
        "miniature australian shepherd",
        "mixed collie",
    )

    _BRACHY_DRUGS = ("acepromazine", "propofol", "ketamine")
    _CARDIAC_DRUGS = ("pimobendan", "furosemide", "atenolol")

    SENSITIVITIES = (
        # Canine
        BreedSensitivity(
            "boxer", Species.CANINE, BreedRiskType.CARDIAC,
            ("acepromazine",) + _CARDIAC_DRUGS,
            "cardiac predisposition, hypotension and syncope with acepromazine"
        ),
        BreedSensitivity(
            "greyhound", Species.CANINE, BreedRiskType.METABOLIC,
            ("thiopental", "propofol"),
            "slow hepatic drug metabolism, expect prolonged recovery"
        ),
        BreedSensitivity(
            "cavalier", Species.CANINE, BreedRiskType.CARDIAC, _CARDIAC_DRUGS,
            "mitral valve disease predisposition, monitor closely"
        ),
        BreedSensitivity(
            "doberman", Species.CANINE, BreedRiskType.CARDIAC, _CARDIAC_DRUGS,
            "cardiomyopathy predisposition, monitor closely"
        ),
        BreedSensitivity(
            "great dane", Species.CANINE, BreedRiskType.CARDIAC, _CARDIAC_DRUGS,
            "cardiomyopathy predisposition, monitor closely"
        ),
        BreedSensitivity(
            "bulldog", Species.CANINE, BreedRiskType.BRACHYCEPHALIC, _BRACHY_DRUGS,
            "brachycephalic airway, increased anesthetic risk"
        ),
        BreedSensitivity(
            "pug", Species.CANINE, BreedRiskType.BRACHYCEPHALIC, _BRACHY_DRUGS,
            "brachycephalic airway, increased anesthetic risk"
        ),
        BreedSensitivity(
            "boston terrier", Species.CANINE, BreedRiskType.BRACHYCEPHALIC, _BRACHY_DRUGS,
            "brachycephalic airway, increased anesthetic risk"
        ),
        BreedSensitivity(
            "pekingese", Species.CANINE, BreedRiskType.BRACHYCEPHALIC, _BRACHY_DRUGS,
            "brachycephalic airway, increased anesthetic risk"
        ),
        BreedSensitivity(
            "shih tzu", Species.CANINE, BreedRiskType.BRACHYCEPHALIC, _BRACHY_DRUGS,
            "brachycephalic airway, increased anesthetic risk"
        ),
        # Feline
        BreedSensitivity(
            "persian", Species.FELINE, BreedRiskType.BRACHYCEPHALIC, _BRACHY_DRUGS,
            "brachycephalic airway, increased anesthetic risk"
        ),
        BreedSensitivity(
            "himalayan", Species.FELINE, BreedRiskType.BRACHYCEPHALIC, _BRACHY_DRUGS,
            "brachycephalic airway, increased anesthetic risk"
        ),
        BreedSensitivity(
            "exotic shorthair", Species.FELINE, BreedRiskType.BRACHYCEPHALIC, _BRACHY_DRUGS,
            "brachycephalic airway, increased anesthetic risk"
        ),
        BreedSensitivity(
            "maine coon", Species.FELINE, BreedRiskType.CARDIAC, ("ketamine", "acepromazine"),
            "HCM predisposition, avoid tachycardic or hypotensive agents"
        ),
        BreedSensitivity(
            "ragdoll", Species.FELINE, BreedRiskType.CARDIAC, ("ketamine", "acepromazine"),
            "HCM predisposition, avoid tachycardic or hypotensive agents"
        ),
        BreedSensitivity(
            "british shorthair", Species.FELINE, BreedRiskType.CARDIAC, ("ketamine", "acepromazine"),
            "HCM predisposition, avoid tachycardic or hypotensive agents"
        ),
        BreedSensitivity(
            "sphynx", Species.FELINE, BreedRiskType.CARDIAC, ("ketamine", "acepromazine"),
            "HCM predisposition, avoid tachycardic or hypotensive agents"
        ),
    )
