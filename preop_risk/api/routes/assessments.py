"""Risk assessment and surgical plan endpoints.

Request bodies are ``PatientRecord`` JSON in camelCase; FastAPI rejects
invalid bodies with 422 before any scoring happens. Responses are the
domain models serialized by alias and returned as ``JSONResponse``, so
FastAPI does not validate them a second time.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from preop_risk.api.dependencies import SlotCatalogDep
from preop_risk.domain.patient_record import PatientRecord
from preop_risk.domain.risk_assessment import RiskAssessment
from preop_risk.domain.scheduling import SurgicalPlan
from preop_risk.domain.services import assess_risk, plan_surgery

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["assessments"])


def _camel_json(model: BaseModel) -> JSONResponse:
    return JSONResponse(content=model.model_dump(mode="json", by_alias=True))


@router.post("/assessments", response_model=RiskAssessment)
async def create_assessment(record: PatientRecord) -> JSONResponse:
    """Score one patient: four category risks, overall tier and factors."""
    assessment = assess_risk(record)
    logger.debug(f"Assessment computed: overall={assessment.overall_risk.value}")
    return _camel_json(assessment)


@router.post("/plans", response_model=SurgicalPlan)
async def create_plan(record: PatientRecord, catalog: SlotCatalogDep) -> JSONResponse:
    """Score one patient and derive resources, slot advice and duration."""
    plan = plan_surgery(record, catalog)
    logger.debug(
        f"Plan computed: overall={plan.assessment.overall_risk.value}, "
        f"resources={len(plan.required_resources)}"
    )
    return _camel_json(plan)
