"""
Onboarding Pydantic Schemas

Each step has a fixed payload shape; the payloads form a tagged union on
`stepName` so that data for one step can never be stored under another.
"""
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from bookflow.schemas.organization import (
    AppointmentModel,
    BufferPolicy,
    BusinessHours,
    Plan,
    Service,
)
from bookflow.utils.time import is_valid_timezone


class StepName(str, Enum):
    INDUSTRY_SELECTION = "industry_selection"
    ORGANIZATION_SETUP = "organization_setup"
    BUSINESS_CONFIGURATION = "business_configuration"
    PLAN_SELECTION = "plan_selection"


# Position in this tuple is the step number minus one
ONBOARDING_STEPS = (
    StepName.INDUSTRY_SELECTION,
    StepName.ORGANIZATION_SETUP,
    StepName.BUSINESS_CONFIGURATION,
    StepName.PLAN_SELECTION,
)


class IndustryType(str, Enum):
    BEAUTY_SALON = "beauty_salon"
    MEDICAL_CLINIC = "medical_clinic"
    HYPERBARIC_CENTER = "hyperbaric_center"
    FITNESS_CENTER = "fitness_center"
    CONSULTANT = "consultant"
    CUSTOM = "custom"


# ============================================================================
# STEP PAYLOADS
# ============================================================================

class IndustrySelectionData(BaseModel):
    stepName: Literal["industry_selection"] = "industry_selection"
    industryType: IndustryType
    customIndustryName: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def require_custom_name(self):
        if self.industryType == IndustryType.CUSTOM and not self.customIndustryName:
            raise ValueError("customIndustryName is required when industryType is custom")
        return self


class OrganizationSetupData(BaseModel):
    stepName: Literal["organization_setup"] = "organization_setup"
    businessName: str = Field(..., min_length=1, max_length=255)
    businessAddress: Optional[str] = Field(None, max_length=500)
    businessPhone: Optional[str] = Field(None, max_length=30)
    businessEmail: Optional[EmailStr] = None
    timezone: str
    currency: str = Field(..., min_length=3, max_length=3)
    businessHours: Optional[BusinessHours] = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if not is_valid_timezone(v):
            raise ValueError(f"Unknown timezone: {v}")
        return v


class BusinessConfigurationData(BaseModel):
    stepName: Literal["business_configuration"] = "business_configuration"
    appointmentModel: AppointmentModel
    allowClientSelection: bool
    bufferBetweenAppointments: int = Field(..., ge=0, le=240)
    maxAdvanceBookingDays: int = Field(..., ge=1, le=365)
    bufferPolicy: BufferPolicy = BufferPolicy.AFTER
    services: List[Service] = Field(default_factory=list)


class PlanSelectionData(BaseModel):
    stepName: Literal["plan_selection"] = "plan_selection"
    planId: Plan
    trialDays: Optional[int] = Field(None, ge=1, le=90)


StepData = Annotated[
    Union[
        IndustrySelectionData,
        OrganizationSetupData,
        BusinessConfigurationData,
        PlanSelectionData,
    ],
    Field(discriminator="stepName"),
]


# ============================================================================
# STATUS
# ============================================================================

class OnboardingStep(BaseModel):
    stepNumber: int
    stepName: StepName
    isCompleted: bool = True
    completedAt: Optional[datetime] = None
    data: Optional[StepData] = None


class OnboardingStatus(BaseModel):
    isCompleted: bool = False
    currentStep: int = 1
    completedSteps: List[OnboardingStep] = Field(default_factory=list)
    industry: Optional[IndustryType] = None
    startedAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None


class OnboardingUpdateRequest(BaseModel):
    stepNumber: int
    stepData: StepData

    @model_validator(mode="before")
    @classmethod
    def tag_step_data(cls, values):
        """Older clients send stepData without stepName; derive it from stepNumber"""
        if not isinstance(values, dict):
            return values
        data = values.get("stepData")
        number = values.get("stepNumber")
        if isinstance(data, dict) and "stepName" not in data and isinstance(number, int):
            if 1 <= number <= len(ONBOARDING_STEPS):
                values = {**values, "stepData": {**data, "stepName": ONBOARDING_STEPS[number - 1].value}}
        return values

    class Config:
        json_schema_extra = {
            "example": {
                "stepNumber": 1,
                "stepData": {"stepName": "industry_selection", "industryType": "beauty_salon"}
            }
        }
