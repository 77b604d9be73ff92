# main.py

import logging
import os
from typing import Optional, List
from datetime import datetime
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import uvicorn

# Import Data Models & Logic
from constants import VERSION, Species, SPECIES_LIBRARY
from models import (
    CalculationInput,
    CalculationResult,
    DosingRule,
    Formulation,
    SafetyLevel,
    WeightUnit,
    WeightValue,
)
from dose_engine import VetDoseEngine

# --- 1. CONFIGURATION & LOGGING ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("vetdose-api")

app = FastAPI(
    title="VetDose API",
    version=VERSION,
    description="Veterinary drug-dosing calculator with species scaling and safety classification. \n\n"
                "**WARNING**: Decision Support Tool Only. Final responsibility lies with the treating veterinarian.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
def read_root():
    return {"status": "active", "message": "VetDose API is running successfully!"}

@app.get("/health")
def health_check():
    """K8s/AWS Health Probe"""
    return {"status": "active", "version": VERSION, "module": "vetdose-dosing-engine"}

# --- 2. STRICT INPUT SCHEMA (The Guardrails) ---
class DosingRuleRequest(BaseModel):
    dose_low: float = Field(..., gt=0, description="Low bound of the per-kg rate")
    dose_high: float = Field(..., gt=0, description="High bound of the per-kg rate")
    dose_unit: str = Field("mg/kg", min_length=1)
    max_dose: Optional[float] = Field(None, gt=0, description="Absolute ceiling")
    is_high_risk: bool = False
    mdr1_sensitive: bool = False
    drug_name: Optional[str] = Field(None, max_length=200)
    indication: Optional[str] = Field(None, max_length=200)
    route: Optional[str] = Field(None, max_length=50)

class FormulationRequest(BaseModel):
    form: str = Field(..., min_length=1, description="e.g. 'Injectable', 'Tablet'")
    concentration: float = Field(..., gt=0)
    concentration_unit: str = Field("mg/ml", min_length=1)

class DoseRequest(BaseModel):
    species: Species
    weight: float = Field(..., gt=0, le=2000.0, description="Patient weight")
    weight_unit: WeightUnit = Field(default=WeightUnit.KG)
    bcs: Optional[int] = Field(None, ge=1, le=9, description="Body condition score (1-9, 5 ideal)")
    breed: Optional[str] = Field(None, max_length=100)
    temperature_c: Optional[float] = Field(None, ge=-10.0, le=50.0, description="Enclosure temperature (reptiles)")
    use_high_dose: bool = False
    rule: DosingRuleRequest
    formulation: Optional[FormulationRequest] = None

    class Config:
        json_schema_extra = {
            "example": {
                "species": "canine", "weight": 10.0, "weight_unit": "kg",
                "breed": "Border Collie", "use_high_dose": False,
                "rule": {"dose_low": 10, "dose_high": 25, "dose_unit": "mg/kg",
                         "drug_name": "Amoxicillin"},
                "formulation": {"form": "Tablet", "concentration": 50,
                                "concentration_unit": "mg/tablet"}
            }
        }

    def to_engine_input(self) -> CalculationInput:
        formulation = None
        if self.formulation is not None:
            formulation = Formulation(**self.formulation.model_dump())
        return CalculationInput(
            species=self.species,
            weight=WeightValue(self.weight, self.weight_unit),
            rule=DosingRule(**self.rule.model_dump()),
            bcs=self.bcs,
            formulation=formulation,
            breed=self.breed,
            temperature_c=self.temperature_c,
            use_high_dose=self.use_high_dose,
        )

# --- 3. EXPLICIT RESPONSE SCHEMA (The Contract) ---
class DoseRangeResponse(BaseModel):
    low: float
    high: float

class DoseResponse(BaseModel):
    dose: float
    dose_unit: str
    dose_range: DoseRangeResponse
    volume: Optional[float] = None
    volume_unit: Optional[str] = None
    safety_level: SafetyLevel
    warnings: List[str]
    adjustments: List[str]
    notes: List[str]
    is_valid: bool
    requires_acknowledgement: bool
    weight_kg: float
    effective_weight_kg: float
    engine_version: str
    generated_at: datetime = Field(default_factory=datetime.now)

class QuickCheckRequest(BaseModel):
    weight_kg: float = Field(..., gt=0, le=2000.0)
    dose_rate: float = Field(..., gt=0)
    max_dose: Optional[float] = Field(None, gt=0)

class QuickCheckResponse(BaseModel):
    dose: float
    exceeds_max: bool

class SpeciesResponse(BaseModel):
    id: Species
    name: str
    min_weight_kg: float
    max_weight_kg: float
    dosing_method: str

# --- 4. ENDPOINTS ---

@app.post("/calculate", response_model=DoseResponse)
def calculate(request: DoseRequest):
    """
    Runs the full dosing pipeline for one patient/drug combination.
    """
    try:
        logger.info(f"Calculating dose for {request.species.value}, Wt: {request.weight}{request.weight_unit.value}")

        result: CalculationResult = VetDoseEngine.calculate_dose(request.to_engine_input())

        if result.safety_level is SafetyLevel.DANGER:
            logger.warning(f"DANGER classification: {result.warnings}")

        payload = result.to_dict()
        payload["requires_acknowledgement"] = result.requires_acknowledgement
        return payload

    except ValueError as e:
        # Precondition violations (InvalidDoseRange, InvalidWeight, ...)
        logger.warning(f"Dose Validation Error: {str(e)}")
        raise HTTPException(status_code=422, detail=f"Dose Validation Error: {str(e)}")

    except Exception as e:
        logger.error(f"Internal Engine Failure: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Dosing Engine Error")

@app.post("/quick-check", response_model=QuickCheckResponse)
def quick_check(request: QuickCheckRequest):
    """Linear weight x rate check against an optional ceiling."""
    check = VetDoseEngine.quick_dose_check(request.weight_kg, request.dose_rate, request.max_dose)
    return {"dose": round(check.dose, 2), "exceeds_max": check.exceeds_max}

@app.get("/species", response_model=List[SpeciesResponse])
def list_species():
    return [
        {
            "id": species,
            "name": profile.name,
            "min_weight_kg": profile.min_weight_kg,
            "max_weight_kg": profile.max_weight_kg,
            "dosing_method": profile.dosing_method.value,
        }
        for species, profile in SPECIES_LIBRARY.SPECS.items()
    ]

# --- 5. SERVER ---

def serve():
    """Console entry point: `vetdose-api`. Bind address from VETDOSE_HOST / VETDOSE_PORT."""
    host = os.environ.get("VETDOSE_HOST", "127.0.0.1")
    port = int(os.environ.get("VETDOSE_PORT", "8000"))
    logger.info(f"Starting VetDose API {VERSION} on {host}:{port}")
    uvicorn.run(app, host=host, port=port)

if __name__ == "__main__":
    serve()
