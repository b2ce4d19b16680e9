"""
Dashboard pages: kanban board, calendar and job detail.

Every route resolves an AuthSession first and lets evaluate_gate decide
whether to render. Data comes from the jobs API; when it fails the pages
fall back to sample jobs with a warning banner instead of erroring.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from jobtracker.core.deps import get_auth_session, get_jobs_client
from jobtracker.dashboard.board import DashboardState, month_grid
from jobtracker.dashboard.sample_data import sample_jobs
from jobtracker.dashboard.session import AuthSession, GateOutcome, evaluate_gate
from jobtracker.dashboard.views import (
    current_month,
    render_board,
    render_calendar,
    render_checking,
    render_denied,
    render_job_detail,
    render_not_found,
)
from jobtracker.models.app_user import UserRole
from jobtracker.models.job import JobStatus
from jobtracker.schemas.job import JobDetailResponse
from jobtracker.services.jobs_client import JobsApiClient, JobsApiError

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])
logger = logging.getLogger(__name__)


def gate_response(session: AuthSession, required_role: Optional[UserRole] = None) -> Optional[Response]:
    """The response that replaces the page, or None when it may render."""
    decision = evaluate_gate(session, required_role)
    if decision.outcome == GateOutcome.REDIRECT:
        return RedirectResponse(url=decision.location, status_code=303)
    if decision.outcome == GateOutcome.WAITING:
        return render_checking(session)
    if decision.outcome == GateOutcome.DENIED:
        return render_denied(session)
    return None


def _wants_json(request: Request) -> bool:
    return request.headers.get("content-type", "").startswith("application/json")


@router.get("", response_class=HTMLResponse)
async def board(
    mine: bool = False,
    session: AuthSession = Depends(get_auth_session),
    client: JobsApiClient = Depends(get_jobs_client)
):
    """
    Kanban board. `?mine=1` shows only jobs owned by the signed-in user.
    """
    blocked = gate_response(session, UserRole.VIEWER)
    if blocked is not None:
        return blocked

    state = DashboardState(client, identities=session.identities, mine_only=mine)
    await state.load()
    return render_board(state, session)


@router.get("/calendar", response_class=HTMLResponse)
async def calendar_view(
    year: Optional[int] = Query(None, ge=1970, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    mine: bool = False,
    session: AuthSession = Depends(get_auth_session),
    client: JobsApiClient = Depends(get_jobs_client)
):
    """
    Month calendar of in-hands dates. Defaults to the current month.
    """
    blocked = gate_response(session, UserRole.VIEWER)
    if blocked is not None:
        return blocked

    this_year, this_month = current_month()
    year = year or this_year
    month = month or this_month

    state = DashboardState(client, identities=session.identities, mine_only=mine)
    await state.load()
    weeks = month_grid(year, month, state.visible_jobs())
    return render_calendar(year, month, weeks, session, warnings=state.warnings, mine_only=state.mine_only)


@router.get("/jobs/{job_id}", response_class=HTMLResponse)
async def job_detail(
    job_id: int,
    session: AuthSession = Depends(get_auth_session),
    client: JobsApiClient = Depends(get_jobs_client)
):
    blocked = gate_response(session, UserRole.VIEWER)
    if blocked is not None:
        return blocked

    try:
        job = await client.get_job(job_id)
    except JobsApiError as e:
        if e.status_code == 404:
            return render_not_found(session, f"Job {job_id} not found")
        fallback = next((sample for sample in sample_jobs() if sample.id == job_id), None)
        if fallback is None:
            return render_not_found(session, f"Job {job_id} is unavailable right now ({e}).")
        warning = f"Live data is unavailable ({e}). Showing a sample job."
        return render_job_detail(JobDetailResponse(**fallback.model_dump()), session, warnings=[warning])

    return render_job_detail(job, session)


@router.post("/jobs/{job_id}/status")
async def move_job(
    job_id: int,
    request: Request,
    session: AuthSession = Depends(get_auth_session),
    client: JobsApiClient = Depends(get_jobs_client)
):
    """
    Change a job's status from the board.

    The drag-and-drop script posts JSON and gets JSON back; the no-script
    form posts a form and gets the re-rendered board. Either way the board
    keeps the new status even if saving failed, with a warning.
    """
    wants_json = _wants_json(request)

    blocked = gate_response(session, UserRole.STAFF)
    if blocked is not None:
        if wants_json:
            code = 403 if session.user is not None else 401
            return JSONResponse(status_code=code, content={"ok": False, "warning": "You cannot change job status."})
        return blocked

    if wants_json:
        try:
            payload = await request.json()
        except ValueError:
            payload = None
        raw_status = payload.get("status") if isinstance(payload, dict) else None
    else:
        form = await request.form()
        raw_status = form.get("status")

    try:
        status = JobStatus(raw_status)
    except ValueError:
        message = f"Unknown status: {raw_status}"
        if wants_json:
            return JSONResponse(status_code=400, content={"ok": False, "warning": message})
        return render_not_found(session, message)

    state = DashboardState(client, identities=session.identities)
    await state.load()
    job = await state.move(job_id, status)

    if wants_json:
        warning = state.warnings[-1] if state.warnings else None
        if job is None:
            return JSONResponse(status_code=502, content={"ok": False, "warning": warning})
        return {
            "ok": not state.warnings,
            "job": job.model_dump(mode="json"),
            "warning": warning,
        }

    return render_board(state, session)
