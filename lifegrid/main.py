from fastapi import FastAPI, Depends, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from uuid import UUID
import logging
import os
from pathlib import Path

from lifegrid.database import engine, get_db, Base
from lifegrid import models  # noqa: F401 - registers tables with Base
from lifegrid.schemas import (
    SprintCreate, SprintUpdate, SprintResponse,
    Effort, EffortCreate, EffortUpdate,
    DayData, MonthData, YearData, SprintStatistics, SprintProgress, GoalPerformance,
    StatsResponse, TrendSlope, TrendSlopesResponse,
    SettingsUpdate, SettingsResponse, LifeStatistics
)
from lifegrid.auth import verify_api_key
from lifegrid import crud
from lifegrid.exceptions import (
    SprintNotFoundException, EffortNotFoundException,
    GoalNotFoundException, ValidationException
)
from lifegrid.services.aggregation_service import AggregationService
from lifegrid.services.sprint_store import SprintStore
from lifegrid.services.statistics_service import StatisticsService
from lifegrid.constants import (
    DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV, CORS_ALLOWED_ORIGINS,
    DEFAULT_STATS_PERIOD_DAYS, DEFAULT_TREND_PERIOD_DAYS
)

LOG_DIR = os.getenv("LIFEGRID_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("LIFEGRID_LOG_FILE", "lifegrid.log")

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger("lifegrid.api")

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="LifeGrid API",
    description="Sprint scoring, streaks and trends for weighted daily goals",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    logger.info(f"LifeGrid API started. Logging to: {log_path}")


def get_store(db: Session = Depends(get_db)) -> SprintStore:
    """Store loaded from persistence for this request"""
    return crud.get_store(db)


def _not_found(e: Exception) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "LifeGrid API", "status": "active"}


# === Sprints ===

@app.get("/api/sprints", response_model=List[SprintResponse], dependencies=[Depends(verify_api_key)])
async def get_sprints(active_only: bool = False, store: SprintStore = Depends(get_store)):
    """Get all sprints (or only those running today)"""
    if active_only:
        return store.active_sprints()
    return store.sprints


@app.post("/api/sprints", response_model=SprintResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def create_sprint(sprint: SprintCreate, store: SprintStore = Depends(get_store)):
    """Create a new sprint"""
    try:
        return crud.create_sprint(store, sprint)
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/api/sprints/{sprint_id}", response_model=SprintResponse, dependencies=[Depends(verify_api_key)])
async def get_sprint(sprint_id: UUID, store: SprintStore = Depends(get_store)):
    try:
        return crud.get_sprint(store, sprint_id)
    except SprintNotFoundException as e:
        raise _not_found(e)


@app.put("/api/sprints/{sprint_id}", response_model=SprintResponse, dependencies=[Depends(verify_api_key)])
async def update_sprint(sprint_id: UUID, sprint_update: SprintUpdate, store: SprintStore = Depends(get_store)):
    """Update a sprint (removing a goal deletes its efforts)"""
    try:
        return crud.update_sprint(store, sprint_id, sprint_update)
    except SprintNotFoundException as e:
        raise _not_found(e)
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.delete("/api/sprints/{sprint_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(verify_api_key)])
async def delete_sprint(sprint_id: UUID, store: SprintStore = Depends(get_store)):
    """Delete a sprint and its efforts"""
    try:
        crud.delete_sprint(store, sprint_id)
    except SprintNotFoundException as e:
        raise _not_found(e)


@app.get("/api/sprints/{sprint_id}/scores", response_model=List[DayData], dependencies=[Depends(verify_api_key)])
async def get_sprint_scores(sprint_id: UUID, store: SprintStore = Depends(get_store)):
    """Day scores across the sprint's span"""
    try:
        return store.sprint_scores(crud.get_sprint(store, sprint_id))
    except SprintNotFoundException as e:
        raise _not_found(e)


@app.get("/api/sprints/{sprint_id}/statistics", response_model=SprintStatistics, dependencies=[Depends(verify_api_key)])
async def get_sprint_statistics(sprint_id: UUID, store: SprintStore = Depends(get_store)):
    try:
        return StatisticsService.sprint_statistics(crud.get_sprint(store, sprint_id))
    except SprintNotFoundException as e:
        raise _not_found(e)


@app.get("/api/sprints/{sprint_id}/progress", response_model=SprintProgress, dependencies=[Depends(verify_api_key)])
async def get_sprint_progress(sprint_id: UUID, store: SprintStore = Depends(get_store)):
    try:
        return store.sprint_progress(crud.get_sprint(store, sprint_id))
    except SprintNotFoundException as e:
        raise _not_found(e)


@app.get("/api/sprints/{sprint_id}/goal-performance", response_model=List[GoalPerformance], dependencies=[Depends(verify_api_key)])
async def get_goal_performance(sprint_id: UUID, store: SprintStore = Depends(get_store)):
    try:
        return store.goal_performance(crud.get_sprint(store, sprint_id))
    except SprintNotFoundException as e:
        raise _not_found(e)


@app.get("/api/statistics/longest-sprint", response_model=Optional[SprintStatistics], dependencies=[Depends(verify_api_key)])
async def get_longest_sprint_statistics(store: SprintStore = Depends(get_store)):
    return StatisticsService.longest_sprint_statistics(store.sprints)


# === Efforts ===

@app.get("/api/efforts", response_model=List[Effort], dependencies=[Depends(verify_api_key)])
async def get_efforts(on: Optional[date] = None, store: SprintStore = Depends(get_store)):
    """Get all efforts, or those logged on one day"""
    return crud.get_efforts(store, on)


@app.post("/api/efforts", response_model=Effort, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def create_effort(effort: EffortCreate, store: SprintStore = Depends(get_store)):
    """Log an effort against a goal"""
    try:
        return crud.create_effort(store, effort)
    except GoalNotFoundException as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.put("/api/efforts/{effort_id}", response_model=Effort, dependencies=[Depends(verify_api_key)])
async def update_effort(effort_id: UUID, effort_update: EffortUpdate, store: SprintStore = Depends(get_store)):
    try:
        return crud.update_effort(store, effort_id, effort_update)
    except EffortNotFoundException as e:
        raise _not_found(e)
    except GoalNotFoundException as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.delete("/api/efforts/{effort_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(verify_api_key)])
async def delete_effort(effort_id: UUID, store: SprintStore = Depends(get_store)):
    try:
        crud.delete_effort(store, effort_id)
    except EffortNotFoundException as e:
        raise _not_found(e)


# === Day data and statistics ===

@app.get("/api/days", response_model=List[DayData], dependencies=[Depends(verify_api_key)])
async def get_day_data(start: date, end: date, store: SprintStore = Depends(get_store)):
    """Day scores for start..end inclusive (empty when end < start)"""
    return store.generate_day_data_for_range(start, end)


@app.get("/api/stats", response_model=StatsResponse, dependencies=[Depends(verify_api_key)])
async def get_stats(
    days: int = Query(DEFAULT_STATS_PERIOD_DAYS, ge=1, le=3650),
    trend_days: int = Query(DEFAULT_TREND_PERIOD_DAYS, ge=1, le=365),
    store: SprintStore = Depends(get_store)
):
    """Average score, completion rate, streak and trends"""
    stats = store.stats_for_period(days)
    return StatsResponse(
        **stats.model_dump(),
        days=days,
        score_trend=store.score_trend(trend_days),
        hours_trend=store.hours_trend(trend_days),
        average_hours=store.average_hours_for_period(days),
    )


@app.get("/api/stats/trend-lines", response_model=TrendSlopesResponse, dependencies=[Depends(verify_api_key)])
async def get_trend_lines(
    days: int = Query(DEFAULT_STATS_PERIOD_DAYS, ge=1, le=3650),
    store: SprintStore = Depends(get_store)
):
    """Regression slopes over the last 4 days, the last week and the whole period"""
    slopes = store.trend_slopes(days)
    if slopes is None:
        return TrendSlopesResponse()
    return TrendSlopesResponse(**{
        name: TrendSlope(slope=slope, description=AggregationService.describe_slope(slope))
        for name, slope in slopes.items()
    })


@app.get("/api/timeline", response_model=List[YearData], dependencies=[Depends(verify_api_key)])
async def get_timeline(store: SprintStore = Depends(get_store)):
    """Year grids covering every sprint"""
    return store.sprint_timeline()


@app.get("/api/timeline/{year}/months", response_model=List[MonthData], dependencies=[Depends(verify_api_key)])
async def get_timeline_months(year: int, store: SprintStore = Depends(get_store)):
    if year < 1 or year > 9999:
        raise HTTPException(status_code=400, detail="Year out of range")
    return store.months_for_year(year)


# === Settings ===

@app.get("/api/settings", response_model=SettingsResponse, dependencies=[Depends(verify_api_key)])
async def get_settings(db: Session = Depends(get_db)):
    return crud.get_settings(db)


@app.put("/api/settings", response_model=SettingsResponse, dependencies=[Depends(verify_api_key)])
async def update_settings(settings_update: SettingsUpdate, db: Session = Depends(get_db)):
    try:
        return crud.update_settings(db, settings_update)
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/api/life-statistics", response_model=LifeStatistics, dependencies=[Depends(verify_api_key)])
async def get_life_statistics(db: Session = Depends(get_db)):
    return crud.get_life_statistics(db)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("lifegrid.main:app", host="0.0.0.0", port=8000, reload=False)
