# backend/app/main.py
import logging

from fastapi import FastAPI

from backend.app.api.run import router as run_router
from backend.app.api.scan import router as scan_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

app = FastAPI(title="quits API")
app.include_router(scan_router, prefix="/api")
app.include_router(run_router, prefix="/api")


@app.get("/api/health", include_in_schema=False)
def health() -> dict:
    return {"ok": True}
