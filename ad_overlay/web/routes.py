"""HTTP routes: decisions, screen geometry, and REST API."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ad_overlay.pipeline import Pipeline
from ad_overlay.recording.models import Detection


def _cast(current_value, new_value):
    """Cast new_value to the same type as the existing config attribute."""
    if isinstance(current_value, bool):
        return new_value in (True, "true", "1", "on", 1)
    elif isinstance(current_value, int):
        return int(float(new_value))
    elif isinstance(current_value, float):
        return float(new_value)
    return new_value


def _typed_dict(config_obj, body: dict) -> dict:
    """Return a dict of values from body, cast to match config_obj field types."""
    result = {}
    for key, value in body.items():
        if hasattr(config_obj, key):
            result[key] = _cast(getattr(config_obj, key), value)
    return result


def _parse_detections(body: dict) -> list[Detection]:
    return [Detection.from_dict(d) for d in body.get("detections", [])]


def create_router(pipeline: Pipeline) -> APIRouter:
    router = APIRouter()

    # --- REST API: decisions ---

    @router.post("/api/decide")
    async def api_decide(request: Request):
        body = await request.json()
        try:
            detections = _parse_detections(body)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            return JSONResponse({"error": f"Invalid detections: {e}"}, 400)
        command = pipeline.decide(detections)
        return JSONResponse(command.to_dict())

    @router.post("/api/classify")
    async def api_classify(request: Request):
        body = await request.json()
        try:
            detections = _parse_detections(body)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            return JSONResponse({"error": f"Invalid detections: {e}"}, 400)
        classifier = pipeline.classifier
        return JSONResponse({
            "category": classifier.classify(detections),
            "scores": classifier.score(detections),
        })

    @router.get("/api/categories")
    async def api_categories():
        classifier = pipeline.classifier
        return JSONResponse({
            "categories": classifier.categories,
            "default": classifier.default_category,
        })

    @router.get("/api/stats")
    async def api_stats():
        return JSONResponse(pipeline.stats)

    @router.get("/api/decisions")
    async def api_decisions(limit: int = 50):
        if pipeline.decision_logger is None:
            return JSONResponse([])
        return JSONResponse([
            {
                "decision_id": r.decision_id,
                "timestamp": r.timestamp,
                "category": r.category,
                "asset_id": r.asset_id,
                "placeholder": r.placeholder,
                "x": r.x,
                "y": r.y,
                "score": r.score,
                "relocated": r.relocated,
                "detection_count": r.detection_count,
            }
            for r in pipeline.decision_logger.get_recent(limit)
        ])

    @router.delete("/api/decisions")
    async def api_clear_decisions():
        count = 0
        if pipeline.decision_logger is not None:
            count = pipeline.decision_logger.clear_all()
        return JSONResponse({"status": "ok", "deleted": count})

    # --- REST API: geometry & settings ---

    @router.put("/api/screen")
    async def api_update_screen(request: Request):
        body = await request.json()
        try:
            dims = pipeline.update_screen(body["width"], body["height"])
        except (KeyError, TypeError, ValueError) as e:
            return JSONResponse({"error": f"Invalid screen size: {e}"}, 400)
        return JSONResponse({"status": "ok", "width": dims.width, "height": dims.height})

    @router.post("/api/settings/placement")
    async def api_update_placement(request: Request):
        body = await request.json()
        typed = _typed_dict(pipeline.config.placement, body)
        pipeline.update_placement_config(**typed)
        return JSONResponse({"status": "ok", "updated": typed})

    return router
