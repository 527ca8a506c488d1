from __future__ import annotations

import logging
import os

import pandas as pd
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import SelectionModel, TransitionRequest, TransitionResponse
from core.data import load_catalog
from core.engine import visible_resources
from core.filters import SelectionState, normalize_selection
from core.navigator import compute_navigator
from core.urlstate import decode, encode

app = FastAPI(title="Resource Navigator API", version="0.1.0")
logger = logging.getLogger(__name__)

CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"]
SHARE_BASE_URL = os.environ.get("NAVIGATOR_SHARE_URL", "")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

TRANSITIONS = {
    "theme": lambda state, value: state.select_theme(value),
    "barrier": lambda state, value: state.select_barrier(value),
    "search": lambda state, value: state.set_search_text(value),
    "persona": lambda state, value: state.toggle_persona(value or ""),
    "clear": lambda state, value: state.clear_all(),
}


def _json(data: object) -> JSONResponse:
    return JSONResponse(content=jsonable_encoder(data))


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _to_model(state: SelectionState) -> SelectionModel:
    return SelectionModel(**state.to_dict())


@app.get("/meta/themes")
def meta_themes():
    try:
        catalog = load_catalog()
        return _json({"themes": [t.to_dict() for t in catalog.themes]})
    except Exception as exc:
        logger.exception("meta_themes failed")
        return _error(exc)


@app.get("/meta/barriers")
def meta_barriers():
    try:
        catalog = load_catalog()
        return _json({"barriers": [b.to_dict() for b in catalog.barriers]})
    except Exception as exc:
        logger.exception("meta_barriers failed")
        return _error(exc)


@app.get("/meta/personas")
def meta_personas():
    try:
        catalog = load_catalog()
        return _json({"personas": list(catalog.personas)})
    except Exception as exc:
        logger.exception("meta_personas failed")
        return _error(exc)


@app.get("/resources")
def resources(request: Request):
    try:
        catalog = load_catalog()
        selection = decode(request.url.query, catalog)
        return _json(compute_navigator(catalog, selection, base_url=SHARE_BASE_URL))
    except Exception as exc:
        logger.exception("resources failed")
        return _error(exc)


@app.post("/navigator")
def navigator(selection: SelectionModel):
    try:
        catalog = load_catalog()
        state = normalize_selection(selection.model_dump(), catalog=catalog)
        return _json(compute_navigator(catalog, state, base_url=SHARE_BASE_URL))
    except Exception as exc:
        logger.exception("navigator failed")
        return _error(exc)


@app.post("/selection/{action}")
def transition(action: str, body: TransitionRequest):
    apply = TRANSITIONS.get(action)
    if apply is None:
        return JSONResponse(
            status_code=400,
            content={"error": f"Unknown action {action!r}", "allowed": sorted(TRANSITIONS)},
        )
    try:
        catalog = load_catalog()
        state = normalize_selection(body.selection.model_dump(), catalog=catalog)
        new_state = apply(state, body.value)
        payload = TransitionResponse(selection=_to_model(new_state), query=encode(new_state))
        return _json(payload.model_dump())
    except Exception as exc:
        logger.exception("transition %s failed", action)
        return _error(exc)


@app.get("/export.csv")
def export_csv(request: Request):
    catalog = load_catalog()
    selection = decode(request.url.query, catalog)
    rows = [r.to_dict() for r in visible_resources(catalog, selection)]
    export_df = pd.DataFrame(rows, columns=["id", "title", "url", "description", "theme_id", "barrier_ids", "personas"])
    if not export_df.empty:
        for col in ["barrier_ids", "personas"]:
            export_df[col] = export_df[col].apply("|".join)
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(
        content=csv_bytes,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=resources.csv"},
    )
