# backend/app/api/run.py
from typing import Optional
from fastapi import APIRouter, Header, HTTPException
from starlette.concurrency import run_in_threadpool

from quits.app.run import run_scan
from quits.config.settings import STORE_PATH
from backend.app.status import run_status_store

router = APIRouter()

@router.post("/run")
async def run_endpoint(
    x_gmail_token: Optional[str] = Header(default=None),
    newer_than_days: Optional[int] = None,
    max_results: int = 200,
) -> dict:
    if not x_gmail_token:
        raise HTTPException(status_code=401, detail="No Gmail token provided")

    run_status_store.start()

    try:
        # Run blocking Gmail processing in a worker thread so FastAPI stays responsive.
        summary = await run_in_threadpool(
            run_scan,
            store_path=STORE_PATH,
            access_token=x_gmail_token,
            newer_than_days=newer_than_days,
            max_results=max_results,
            verbose=False,
            progress_cb=run_status_store.record_progress,
        )
    except Exception as exc:
        run_status_store.fail(str(exc))
        raise

    run_status_store.finish(summary)
    return {"ok": True, "summary": summary}


@router.get("/run/status")
async def run_status() -> dict:
    return {"ok": True, "status": run_status_store.snapshot()}
