# backend/app/routers/heartbeat.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..auth import authorize_heartbeat
from ..db import get_db
from ..schemas import HeartbeatResultOut, UnauthorizedOut
from ..services.heartbeat import HeartbeatResult, run_heartbeat

log = logging.getLogger("casa.heartbeat")

router = APIRouter(tags=["agent"])


@router.post(
    "/agent-heartbeat",
    response_model=HeartbeatResultOut,
    responses={401: {"model": UnauthorizedOut}, 500: {"model": HeartbeatResultOut}},
)
def agent_heartbeat(
    user_id: Optional[str] = Query(default=None, description="Scope the sweep to one user (manual/testing)"),
    x_cron_secret: Optional[str] = Header(default=None, alias="X-Cron-Secret"),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db),
):
    """
    Proactive scan of landlord portfolios.

    Scheduled runs authenticate with X-Cron-Secret; manual runs with an admin
    bearer token. Handled outcomes always answer 200 with the summary, even
    when `errors` is non-empty.
    """
    try:
        caller = authorize_heartbeat(db, cron_secret=x_cron_secret, authorization=authorization)
        if caller is None:
            return JSONResponse(status_code=401, content=UnauthorizedOut().model_dump())

        log.info("agent heartbeat invoked by %s", caller.kind, extra={"user_id": caller.user_id})
        result = run_heartbeat(db, target_user_id=user_id or None)
    except Exception as e:
        log.exception("agent heartbeat error")
        body = HeartbeatResult(errors=[str(e) or "Internal server error"])
        return JSONResponse(status_code=500, content=body.to_dict())

    return HeartbeatResultOut(**result.to_dict())
