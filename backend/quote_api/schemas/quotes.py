import enum

from pydantic import BaseModel, Field


class Material(str, enum.Enum):
    aluminium = "Aluminium"
    steel = "Steel"
    stainless = "Stainless"


class PrepLevel(str, enum.Enum):
    clean = "Clean"  # Basic cleaning
    blast_clean = "BlastClean"  # Blast + clean
    blast_prime = "BlastPrime"  # Blast + prime + clean


class QuoteInput(BaseModel, extra="forbid"):
    length_mm: float = Field(..., ge=10, le=5000, description="Length in millimeters")
    width_mm: float = Field(..., ge=10, le=5000, description="Width in millimeters")
    height_mm: float = Field(..., ge=10, le=5000, description="Height in millimeters")
    material: Material
    prep_level: PrepLevel
    color: str = Field(..., pattern=r"^\d{4}$", description="RAL color code, e.g. 9005")
    turnaround_days: int = Field(..., ge=1, le=30)
    quantity: int = Field(..., ge=1, le=1000)
    is_rush: bool = False


class QuoteOutput(BaseModel):
    base_price: float
    prep_surcharge: float
    rush_surcharge: float
    total_price: float
    currency: str = "EUR"
