"""REST API for the scorebook dashboard and the seating store."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Any, List, Literal

from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse

from pyscorer.analysis import (
    FilterCriteria,
    aggregate_batting,
    aggregate_pitching,
    filter_records,
    player_batting_trend,
    player_pitching_trend,
    rank,
    scatter,
)
from pyscorer.analysis.aggregate import as_batting_records, as_pitching_records
from pyscorer.analysis.ranking import top_entries
from pyscorer.api.schemas import (
    BulkWriteResponse,
    CarPayload,
    DashboardResponse,
    FamilyPayload,
    ImportResponse,
    RankingEntryResponse,
    ScatterPointResponse,
    SnapshotPayload,
    TrendResponse,
    car_key,
)
from pyscorer.dashboard import DashboardState, player_directory, recompute
from pyscorer.ingest import import_files, load_sample_data
from pyscorer.persistence import (
    DatasetCache,
    DuplicateKeyError,
    SeatingStore,
    StoreBlockedError,
    StoreError,
)


logger = logging.getLogger(__name__)


def _filters(
    start_date: str | None = None,
    end_date: str | None = None,
    team: str | None = None,
    category: str = "all",
) -> FilterCriteria:
    return FilterCriteria(
        start_date=start_date or None,
        end_date=end_date or None,
        team_keyword=team or None,
        category=category or "all",
    )


def _require(item: dict | None, label: str) -> dict:
    if item is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return item


def create_app(db_path: Path | str | None = None, cache_path: Path | str | None = None) -> FastAPI:
    store = SeatingStore(db_path).open()
    cache = DatasetCache(cache_path)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        try:
            yield
        finally:
            store.close()

    app = FastAPI(title="pyscorer", lifespan=lifespan)
    app.state.store = store
    app.state.cache = cache

    def load_datasets() -> dict[str, Any]:
        cached = cache.load()
        if cached is not None:
            return {"batting": cached.batting, "pitching": cached.pitching, "imported_at": cached.imported_at}
        batting, pitching = load_sample_data()
        return {"batting": batting, "pitching": pitching, "imported_at": None}

    app.state.datasets = load_datasets()

    def filtered(criteria: FilterCriteria):
        datasets = app.state.datasets
        batting = filter_records(as_batting_records(datasets["batting"]), criteria)
        pitching = filter_records(as_pitching_records(datasets["pitching"]), criteria)
        return batting, pitching

    @app.exception_handler(StoreBlockedError)
    async def store_blocked(_request: Request, exc: StoreBlockedError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(DuplicateKeyError)
    async def duplicate_key(_request: Request, exc: DuplicateKeyError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(StoreError)
    async def store_failed(_request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store operation failed: %s", exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    # -- datasets ----------------------------------------------------------

    @app.post("/import", response_model=ImportResponse)
    async def import_csv(files: List[UploadFile] = File(...)) -> ImportResponse:
        pairs: list[tuple[str, str]] = []
        for upload in files:
            contents = await upload.read()
            pairs.append((upload.filename or "", contents.decode("utf-8-sig", errors="replace")))

        datasets = app.state.datasets
        result = import_files(pairs, batting=datasets["batting"], pitching=datasets["pitching"])
        if result.imported_count:
            imported_at = cache.save(result.batting, result.pitching)
            app.state.datasets = {
                "batting": result.batting,
                "pitching": result.pitching,
                "imported_at": imported_at,
            }
        return ImportResponse(
            message=result.message,
            imported_count=result.imported_count,
            batting_rows=len(result.batting),
            pitching_rows=len(result.pitching),
            skipped_files=result.skipped_files,
            imported_at=app.state.datasets["imported_at"],
        )

    @app.delete("/data")
    async def clear_data() -> dict[str, Any]:
        cache.clear()
        app.state.datasets = load_datasets()
        return {
            "status": "cleared",
            "batting_rows": len(app.state.datasets["batting"]),
            "pitching_rows": len(app.state.datasets["pitching"]),
        }

    @app.get("/dashboard", response_model=DashboardResponse)
    async def dashboard(
        criteria: FilterCriteria = Depends(_filters),
        trend_target: Literal["team", "player"] = "team",
        trend_type: Literal["batting", "pitching"] = "batting",
        player: str | None = None,
        metric: str = "avg",
        min_sample: float = Query(0, ge=0),
        scatter_x: str = "obp",
        scatter_y: str = "slg",
    ) -> DashboardResponse:
        datasets = app.state.datasets
        state = DashboardState(
            batting=datasets["batting"],
            pitching=datasets["pitching"],
            filters=criteria,
            trend_target=trend_target,
            trend_type=trend_type,
            selected_player=player,
            comparison_metric=metric,
            min_sample=min_sample,
            scatter_x=scatter_x,
            scatter_y=scatter_y,
        )
        try:
            view = recompute(state)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return DashboardResponse.model_validate({**asdict(view), "imported_at": datasets["imported_at"]})

    @app.get("/ranking", response_model=List[RankingEntryResponse])
    async def ranking(
        criteria: FilterCriteria = Depends(_filters),
        metric: str = "avg",
        min_sample: float = Query(0, ge=0),
        limit: int | None = Query(None, ge=1),
    ) -> list[RankingEntryResponse]:
        batting, pitching = filtered(criteria)
        try:
            entries = rank(aggregate_batting(batting), aggregate_pitching(pitching), metric, min_sample)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return [RankingEntryResponse(name=entry.name, value=entry.value) for entry in top_entries(entries, limit)]

    @app.get("/scatter", response_model=List[ScatterPointResponse])
    async def scatter_points(
        criteria: FilterCriteria = Depends(_filters),
        x: str = "obp",
        y: str = "slg",
        min_sample: float = Query(0, ge=0),
    ) -> list[ScatterPointResponse]:
        batting, _ = filtered(criteria)
        try:
            points = scatter(aggregate_batting(batting), x, y, min_sample)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return [ScatterPointResponse(**asdict(point)) for point in points]

    @app.get("/players/{player_key}/trend", response_model=TrendResponse)
    async def player_trend(
        player_key: str,
        kind: Literal["batting", "pitching"] = "batting",
        criteria: FilterCriteria = Depends(_filters),
    ) -> TrendResponse:
        datasets = app.state.datasets
        known = {
            entry.player_key
            for entry in player_directory(
                as_batting_records(datasets["batting"]),
                as_pitching_records(datasets["pitching"]),
            )
        }
        if player_key not in known:
            raise HTTPException(status_code=404, detail="Player not found")
        batting, pitching = filtered(criteria)
        if kind == "pitching":
            points = [point.to_dict() for point in player_pitching_trend(pitching, player_key)]
        else:
            points = [point.to_dict() for point in player_batting_trend(batting, player_key)]
        return TrendResponse(player_key=player_key, kind=kind, points=points)

    # -- families ----------------------------------------------------------

    @app.get("/families")
    async def list_families() -> list[dict]:
        return store.list_families()

    @app.get("/families/{family_name}")
    async def get_family(family_name: str) -> dict:
        return _require(store.get_family(family_name), "Family")

    @app.post("/families", status_code=201)
    async def add_family(payload: FamilyPayload) -> dict:
        return store.add_family(payload.to_item())

    @app.put("/families/{family_name}")
    async def update_family(family_name: str, payload: FamilyPayload) -> dict:
        item = payload.to_item()
        item["familyName"] = family_name
        return store.update_family(item)

    @app.delete("/families/{family_name}")
    async def delete_family(family_name: str) -> dict[str, Any]:
        _require(store.get_family(family_name), "Family")
        store.delete_family(family_name)
        return {"deleted": family_name}

    @app.post("/families/bulk", response_model=BulkWriteResponse)
    async def bulk_families(payload: List[FamilyPayload]) -> BulkWriteResponse:
        stored = store.bulk_add_families([family.to_item() for family in payload])
        return BulkWriteResponse(count=len(stored))

    @app.delete("/families")
    async def clear_families() -> dict[str, str]:
        store.clear("families")
        return {"status": "cleared"}

    # -- cars --------------------------------------------------------------

    @app.get("/cars")
    async def list_cars() -> list[dict]:
        return store.list_cars()

    @app.get("/cars/{car_id}")
    async def get_car(car_id: str) -> dict:
        return _require(store.get_car(car_key(car_id)), "Car")

    @app.post("/cars", status_code=201)
    async def add_car(payload: CarPayload) -> dict:
        return store.add_car(payload.to_item())

    @app.put("/cars/{car_id}")
    async def update_car(car_id: str, payload: CarPayload) -> dict:
        item = payload.to_item()
        item["id"] = car_key(car_id)
        return store.update_car(item)

    @app.delete("/cars/{car_id}")
    async def delete_car(car_id: str) -> dict[str, Any]:
        key = car_key(car_id)
        _require(store.get_car(key), "Car")
        store.delete_car(key)
        return {"deleted": key}

    @app.post("/cars/bulk", response_model=BulkWriteResponse)
    async def bulk_cars(payload: List[CarPayload]) -> BulkWriteResponse:
        stored = store.bulk_add_cars([car.to_item() for car in payload])
        return BulkWriteResponse(count=len(stored))

    @app.delete("/cars")
    async def clear_cars() -> dict[str, str]:
        store.clear("cars")
        return {"status": "cleared"}

    # -- saved seating states ----------------------------------------------

    @app.get("/states")
    async def list_states(limit: int | None = Query(None, ge=1)) -> list[dict]:
        return store.list_saved_states(limit)

    @app.get("/states/{state_id}")
    async def get_state(state_id: int) -> dict:
        return _require(store.get_saved_state(state_id), "Saved state")

    @app.post("/states", status_code=201)
    async def save_state(payload: SnapshotPayload) -> dict:
        return store.save_state(payload.to_item())

    @app.delete("/states/{state_id}")
    async def delete_state(state_id: int) -> dict[str, Any]:
        _require(store.get_saved_state(state_id), "Saved state")
        store.delete_saved_state(state_id)
        return {"deleted": state_id}

    @app.delete("/states")
    async def clear_states() -> dict[str, str]:
        store.clear("saved_states")
        return {"status": "cleared"}

    # -- saved parking layouts ---------------------------------------------

    @app.get("/parking")
    async def list_parking(limit: int | None = Query(None, ge=1)) -> list[dict]:
        return store.list_saved_parking(limit)

    @app.get("/parking/{parking_id}")
    async def get_parking(parking_id: int) -> dict:
        return _require(store.get_saved_parking(parking_id), "Saved parking layout")

    @app.post("/parking", status_code=201)
    async def save_parking(payload: SnapshotPayload) -> dict:
        return store.save_parking(payload.to_item())

    @app.delete("/parking/{parking_id}")
    async def delete_parking(parking_id: int) -> dict[str, Any]:
        _require(store.get_saved_parking(parking_id), "Saved parking layout")
        store.delete_saved_parking(parking_id)
        return {"deleted": parking_id}

    @app.post("/parking/bulk", response_model=BulkWriteResponse)
    async def bulk_parking(payload: List[SnapshotPayload]) -> BulkWriteResponse:
        stored = store.bulk_add_parking([snapshot.to_item() for snapshot in payload])
        return BulkWriteResponse(count=len(stored))

    @app.delete("/parking")
    async def clear_parking() -> dict[str, str]:
        store.clear("saved_parking")
        return {"status": "cleared"}

    @app.delete("/store")
    async def clear_store() -> dict[str, str]:
        store.clear_all()
        return {"status": "cleared"}

    return app


__all__ = ["create_app"]
