from datetime import datetime
from typing import Any, Dict, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------
# Request / Response Models
# ---------------------------
class IkigaiAnswers(BaseModel):
    love: str
    goodAt: str
    paidFor: str
    worldNeeds: str


class AnalyzeRequest(BaseModel):
    ikigaiResponseId: UUID | None = None
    responses: IkigaiAnswers


class AnalyzeResponse(BaseModel):
    success: bool = True
    reportId: str
    analysis: Dict[str, Any]


class SaveReportRequest(BaseModel):
    userId: str
    reportData: Dict[str, Any]
    reportType: str = "career_analysis"


class ErrorResponse(BaseModel):
    success: bool = False
    error: str

# ---------------- Analysis Models ----------------

class IkigaiAlignment(BaseModel):
    model_config = ConfigDict(extra="allow")

    passionScore: float = Field(ge=0, le=100)
    missionScore: float = Field(ge=0, le=100)
    vocationScore: float = Field(ge=0, le=100)
    professionScore: float = Field(ge=0, le=100)


class AnalysisResult(BaseModel):
    """Top-level shape every model completion must satisfy before storage."""

    model_config = ConfigDict(extra="allow")

    executiveSummary: str
    ikigaiAlignment: IkigaiAlignment
    careerRecommendations: List[Dict[str, Any]]
    skillAnalysis: Dict[str, Any]
    marketAnalysis: Dict[str, Any]
    actionPlan: Dict[str, Any]
    personalityInsights: Dict[str, Any]
    networkingStrategy: Dict[str, Any]
    compensationGuidance: Dict[str, Any]

# ---------------- Stored Records ----------------

class Report(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    ikigai_response_id: str | None = None
    report_type: str
    report_data: Dict[str, Any]
    generated_at: datetime | None = None
    user_id: str | None = None

# ---------------- Resume Models ----------------

class PersonalInfo(BaseModel):
    name: str | None = None
    title: str | None = None
    linkedin_url: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None


class Experience(BaseModel):
    company: str | None = None
    location: str | None = None
    role: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    responsibilities: List[str] | None = None


class Education(BaseModel):
    institution: str | None = None
    location: str | None = None
    degree: str | None = None
    start_date: str | None = None
    end_date: str | None = None


class TechnicalSkills(BaseModel):
    technical_skills: List[str] | None = None
    frameworks_libraries: List[str] | None = None
    tools: List[str] | None = None


class Project(BaseModel):
    project_name: str | None = None
    description: str | None = None
    tech_stack: List[str] | None = None


class ResumeData(BaseModel):
    personal_info: PersonalInfo | None = None
    professional_experience: List[Experience] | None = None
    education: List[Education] | None = None
    technical_skills: TechnicalSkills | None = None
    additional_information: List[str] | None = None
    projects: List[Project] | None = None
