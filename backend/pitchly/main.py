"""
main.py — Pitchly API Entrypoint

Builds the FastAPI `app` served by uvicorn:
- configures logging from settings
- opens CORS for the dashboard frontend
- mounts the v1 routers: quotes, dashboard, valuation, peers, exports,
  analysis, alerts and research

Run locally:
    uvicorn pitchly.main:app --reload --app-dir backend
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pitchly.api.v1 import alerts, analysis, dashboard, exports, peers, quotes, research, valuation
from pitchly.core.config import settings
from pitchly.core.logging import configure_logging

# -----------------------------------------------------------------------------
# App Initialization
# -----------------------------------------------------------------------------

configure_logging(settings.LOG_LEVEL)

app = FastAPI(
    title="Pitchly Valuation Backend",
    description="Quote normalization, DCF/DDM, LBO and peer comparison engine behind the Pitchly dashboard",
    version="0.1.0",
)

# -----------------------------------------------------------------------------
# CORS (the dashboard frontend is served from another origin)
# -----------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------------------------------------------------------
# Router Registration
# -----------------------------------------------------------------------------

# Each router carries its own resource prefix
app.include_router(quotes.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")
app.include_router(valuation.router, prefix="/api/v1")
app.include_router(peers.router, prefix="/api/v1")
app.include_router(exports.router, prefix="/api/v1")
app.include_router(analysis.router, prefix="/api/v1")
app.include_router(alerts.router, prefix="/api/v1")
app.include_router(research.router, prefix="/api/v1")

# -----------------------------------------------------------------------------
# Health Check
# -----------------------------------------------------------------------------

@app.get("/")
def root():
    return {"status": "ok", "message": "Pitchly backend running"}
