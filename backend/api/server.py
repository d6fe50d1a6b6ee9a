"""
api/server.py
-------------
FastAPI application entry point.

Run dev server:
    cd backend
    uvicorn api.server:app --reload --port 8000

Endpoints:
    GET  /v1/health
    POST /v1/itinerary/generate
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from api.routes import health, itinerary

logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

app = FastAPI(
    title="Tour Planner Itinerary API",
    version="1.0.0",
    description=(
        "Turns a trip (dates, home, overnight stays, points of interest) "
        "into a day-by-day itinerary."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# Allow the browser planner (any origin during development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router,     prefix="/v1",           tags=["Health"])
app.include_router(itinerary.router,  prefix="/v1/itinerary", tags=["Itinerary"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:app", host=config.API_HOST, port=config.API_PORT, reload=True)
