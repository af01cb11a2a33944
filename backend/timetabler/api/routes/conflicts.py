from fastapi import APIRouter

from timetabler.schemas.conflict import ConflictReport, DetectConflictsRequest
from timetabler.services.conflict_service import ConflictService

router = APIRouter()

@router.post("/detect", response_model=ConflictReport)
def detect_conflicts(payload: DetectConflictsRequest):
    service = ConflictService(payload.timetable, payload.input)
    report = service.detect_conflicts()

    # Generate resolutions for each conflict
    for conflict in report.conflicts:
        resolutions = service.generate_resolutions(conflict)
        report.suggested_resolutions.extend(resolutions)

    return report
