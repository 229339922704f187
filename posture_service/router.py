"""
POSHER Posture Service Router

Endpoints for per-frame posture / exercise-form scoring, the exercise
catalogue, walking-posture prescriptions, symptom screening and session
planning. The pose model runs client-side; clients send keypoints.
"""

import json
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field, ValidationError

from core.config import settings
from shared.utils import handle_exceptions, log_execution_time, success_response
from .models import (
    ExerciseCategory,
    FrameScorer,
    Keypoint,
    PainLocation,
    StressLevel,
    SymptomData,
    build_session_plan,
    build_suggestions,
    check_full_body_visibility,
    check_joint_visibility,
    find_divergences,
    get_frame_scorer,
    list_exercises,
    prescribe_for_score,
    resolve_kind,
    screen_symptoms,
    visible_keypoints,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ============= Pydantic Models =============

class KeypointIn(BaseModel):
    name: Optional[str] = None
    x: float = Field(..., allow_inf_nan=False)
    y: float = Field(..., allow_inf_nan=False)
    score: Optional[float] = Field(None, ge=0.0, le=1.0)

    def to_keypoint(self) -> Keypoint:
        return Keypoint(x=self.x, y=self.y, name=self.name, score=self.score)


class ScoreRequest(BaseModel):
    mode: str
    keypoints: Optional[List[KeypointIn]] = None  # None: no pose detected
    full_body: bool = False


class VisibilityRequest(BaseModel):
    keypoints: Optional[List[KeypointIn]] = None
    threshold: Optional[float] = Field(None, ge=0.0, le=1.0)
    check_distance: bool = False


class FrameMessage(BaseModel):
    keypoints: Optional[List[KeypointIn]] = None


class SymptomsIn(BaseModel):
    pain_now: int = Field(3, ge=0, le=10)
    pain_worst: int = Field(6, ge=0, le=10)
    location: Literal["low", "mid", "upper"] = "low"
    duration_days: int = Field(7, ge=0)
    numbness: bool = False
    fever: bool = False
    bladder_bowel: bool = False
    trauma: bool = False
    desk_hours: int = Field(6, ge=0)
    sleep_hours: int = Field(7, ge=0)
    stress: Literal["low", "med", "high"] = "med"

    def to_symptoms(self) -> SymptomData:
        return SymptomData(
            pain_now=self.pain_now,
            pain_worst=self.pain_worst,
            location=PainLocation(self.location),
            duration_days=self.duration_days,
            numbness=self.numbness,
            fever=self.fever,
            bladder_bowel=self.bladder_bowel,
            trauma=self.trauma,
            desk_hours=self.desk_hours,
            sleep_hours=self.sleep_hours,
            stress=StressLevel(self.stress),
        )


class PlanRequest(BaseModel):
    symptoms: Optional[SymptomsIn] = None
    last_score: float = Field(0, ge=0, le=100)
    cues: List[str] = []


def _to_keypoints(items: Optional[List[KeypointIn]]) -> List[Keypoint]:
    return [item.to_keypoint() for item in items or []]


def _scorer_for(full_body: bool) -> FrameScorer:
    return FrameScorer.full_body() if full_body else get_frame_scorer()


# ============= REST Endpoints =============

@router.get("/exercises")
async def get_exercises(category: Optional[str] = None):
    """
    List supported modes with their display markers.

    Markers carry both the authored display range and the range the scoring
    checks enforce; disagreements are listed under `divergences`.
    """
    selected = None
    if category:
        try:
            selected = ExerciseCategory(category)
        except ValueError:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid category. Valid categories: {[c.value for c in ExerciseCategory]}"
            )

    exercises = [entry.to_dict() for entry in list_exercises(selected)]
    return success_response({
        "exercises": exercises,
        "count": len(exercises),
        "divergences": [d.to_dict() for d in find_divergences()],
    })


@router.post("/score")
@log_execution_time
async def score_frame(request: ScoreRequest):
    """
    Score a single frame of keypoints for the selected mode.

    Unknown modes return a zero score with an "Unsupported mode" cue.
    """
    scorer = _scorer_for(request.full_body)
    result = scorer.score_frame(_to_keypoints(request.keypoints), request.mode)
    return success_response(result.to_dict())


@router.post("/visibility")
async def check_visibility(request: VisibilityRequest):
    """
    Report missing joints and, optionally, the too-close heuristic.

    `visible_joints` lists every keypoint a display sink should draw.
    """
    keypoints = _to_keypoints(request.keypoints)
    threshold = request.threshold
    if request.check_distance:
        if threshold is None:
            threshold = settings.FULL_BODY_VISIBILITY_THRESHOLD
        visibility = check_full_body_visibility(keypoints, threshold=threshold)
    else:
        if threshold is None:
            threshold = settings.POSE_VISIBILITY_THRESHOLD
        visibility = check_joint_visibility(keypoints, threshold=threshold)

    return success_response({
        **visibility.to_dict(),
        "visible_joints": [kp.name for kp in visible_keypoints(keypoints, threshold=threshold)],
    })


@router.get("/recommendations")
async def get_recommendations(score: float = Query(..., ge=0, le=100)):
    """Walking-posture prescription for a score."""
    return success_response(prescribe_for_score(score).to_dict())


@router.post("/screening")
@handle_exceptions
async def screening(symptoms: SymptomsIn):
    """Triage reported symptoms. General education, not medical advice."""
    return success_response(screen_symptoms(symptoms.to_symptoms()).to_dict())


@router.post("/plan")
@handle_exceptions
async def generate_plan(request: PlanRequest):
    """
    Build a guided session from symptoms and the last form score.

    Items that map to a vision-tracked mode carry its id in `pose_mode`.
    """
    symptoms = request.symptoms.to_symptoms() if request.symptoms else None
    plan = build_session_plan(symptoms, request.last_score)
    suggestions = build_suggestions(symptoms, request.last_score, request.cues)

    return success_response({
        "plan": plan.to_dict(),
        "screening": screen_symptoms(symptoms).to_dict() if symptoms else None,
        "suggestions": suggestions.to_dict(),
        "disclaimer": "This is general education, not medical advice. "
                      "Seek care for severe/persistent symptoms or any red flags.",
    })


# ============= WebSocket Endpoints =============

@router.websocket("/ws/stream/{mode}")
async def posture_stream(websocket: WebSocket, mode: str, full_body: bool = False):
    """
    Real-time scoring stream.

    Receives one JSON message per frame: {"keypoints": [...]}.
    Replies with a POSE_RESULT per frame, or ERROR for an unreadable frame.
    """
    await websocket.accept()
    scorer = _scorer_for(full_body)
    kind = resolve_kind(mode)

    try:
        await websocket.send_json({
            "type": "CONNECTED",
            "mode": kind.value if kind else mode,
            "supported": kind is not None,
            "message": "Posture stream connected"
        })

        while True:
            try:
                data = await websocket.receive_text()
            except KeyError:
                await websocket.send_json({
                    "type": "ERROR",
                    "message": "Binary frames are not supported; send JSON text"
                })
                continue

            try:
                message = FrameMessage.model_validate(json.loads(data))
            except (TypeError, ValueError, ValidationError) as e:
                await websocket.send_json({
                    "type": "ERROR",
                    "message": f"Invalid frame data: {e}"
                })
                continue

            result = scorer.score_frame(_to_keypoints(message.keypoints), mode)
            await websocket.send_json({"type": "POSE_RESULT", **result.to_dict()})

    except WebSocketDisconnect:
        logger.info(f"Client disconnected from posture stream ({mode})")
