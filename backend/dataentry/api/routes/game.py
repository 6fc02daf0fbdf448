"""Game endpoints - create sessions, drive the game state machine, play the active stage."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from dataentry.core.errors import ContractViolation, StageValidationError
from dataentry.core.game_controller import GameController
from dataentry.core.stage_controller import StageController
from dataentry.schemas.game import (
    FieldUpdateRequest,
    FieldUpdateResponse,
    GameStateResponse,
    GameSummary,
    StageView,
    SubmitErrorResponse,
    TickResponse,
)
from dataentry.schemas.stage import ScoreResult
from dataentry.services.session_service import SessionService, get_session_service

router = APIRouter()


def _get_game_or_404(session_id: str, sessions: SessionService) -> GameController:
    game = sessions.get(session_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Game session not found")
    return game


def _get_stage_or_409(game: GameController) -> StageController:
    if game.active_stage is None:
        raise HTTPException(status_code=409, detail=f"No active stage while game is {game.status}")
    return game.active_stage


def _stage_view(controller: StageController) -> StageView:
    stage = controller.stage
    return StageView(
        sequence_number=stage.sequence_number,
        name=stage.name,
        description=stage.description,
        reference_material=stage.reference_material,
        fields=stage.fields,
        field_groups=stage.field_groups,
        values=dict(controller.submission),
        field_errors=dict(controller.field_errors),
        status=controller.status,
        time_remaining=controller.time_remaining,
        result=controller.result,
    )


def _game_response(session_id: str, game: GameController) -> GameStateResponse:
    return GameStateResponse(
        session_id=session_id,
        state=game.snapshot(),
        stage=_stage_view(game.active_stage) if game.active_stage else None,
    )


def _transition(action):
    try:
        return action()
    except ContractViolation as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/", response_model=GameStateResponse, status_code=201)
async def create_game(sessions: SessionService = Depends(get_session_service)):
    """Create a new game session on the intro screen."""
    session_id, game = sessions.create()
    return _game_response(session_id, game)


@router.get("/{session_id}", response_model=GameStateResponse)
async def get_game(session_id: str, sessions: SessionService = Depends(get_session_service)):
    """Current game state and, while playing, the active stage."""
    game = _get_game_or_404(session_id, sessions)
    return _game_response(session_id, game)


@router.delete("/{session_id}", status_code=204)
async def delete_game(session_id: str, sessions: SessionService = Depends(get_session_service)):
    if not sessions.delete(session_id):
        raise HTTPException(status_code=404, detail="Game session not found")


@router.post("/{session_id}/start", response_model=GameStateResponse)
async def start_game(session_id: str, sessions: SessionService = Depends(get_session_service)):
    game = _get_game_or_404(session_id, sessions)
    _transition(game.start)
    return _game_response(session_id, game)


@router.post("/{session_id}/quit", response_model=GameStateResponse)
async def quit_game(session_id: str, sessions: SessionService = Depends(get_session_service)):
    """Abandon the current game; the unfinished stage is not scored."""
    game = _get_game_or_404(session_id, sessions)
    _transition(game.quit)
    return _game_response(session_id, game)


@router.post("/{session_id}/restart", response_model=GameStateResponse)
async def restart_game(session_id: str, sessions: SessionService = Depends(get_session_service)):
    game = _get_game_or_404(session_id, sessions)
    _transition(game.restart)
    return _game_response(session_id, game)


@router.put("/{session_id}/fields/{field_id}", response_model=FieldUpdateResponse)
async def update_field(
    session_id: str,
    field_id: str,
    req: FieldUpdateRequest,
    sessions: SessionService = Depends(get_session_service),
):
    """Store one field value and report whether it validates."""
    game = _get_game_or_404(session_id, sessions)
    stage = _get_stage_or_409(game)
    if stage.stage.get_field(field_id) is None:
        raise HTTPException(status_code=404, detail=f"Unknown field '{field_id}'")

    valid = _transition(lambda: stage.update_field(field_id, req.value))
    error = None if valid else stage.check_field(field_id)
    return FieldUpdateResponse(field_id=field_id, valid=valid, error=error)


@router.post(
    "/{session_id}/submit",
    response_model=ScoreResult,
    responses={422: {"model": SubmitErrorResponse}},
)
async def submit_stage(session_id: str, sessions: SessionService = Depends(get_session_service)):
    """Submit the active stage. The game advances once the result display delay passes."""
    game = _get_game_or_404(session_id, sessions)
    stage = _get_stage_or_409(game)
    try:
        return _transition(stage.submit)
    except StageValidationError as e:
        return JSONResponse(
            status_code=422,
            content=SubmitErrorResponse(detail="Some fields need attention", errors=e.errors).model_dump(),
        )


@router.post("/{session_id}/tick", response_model=TickResponse)
async def tick_stage(session_id: str, sessions: SessionService = Depends(get_session_service)):
    """One second of the stage clock. Returns the forced result when time runs out."""
    game = _get_game_or_404(session_id, sessions)
    stage = _get_stage_or_409(game)
    result = _transition(stage.tick)
    return TickResponse(time_remaining=stage.time_remaining, result=result)


@router.get("/{session_id}/summary", response_model=GameSummary)
async def get_summary(session_id: str, sessions: SessionService = Depends(get_session_service)):
    """Final results, rating and achievements for a completed game."""
    game = _get_game_or_404(session_id, sessions)
    return _transition(game.summary)
