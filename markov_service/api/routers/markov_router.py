from typing import List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from markov_service.config import settings, max_steps_or_none
from markov_service.services.corpus import add_records
from markov_service.services.markov import ChainModel, train_from_chains
from markov_service.utils.logger import setup_logger

logger = setup_logger(__name__)

router = APIRouter(prefix="/markov", tags=["markov"])

# In-memory model cache
MODEL_CACHE: dict[str, ChainModel] = {}


class TrainRequest(BaseModel):
    chains: List[List[str]] = Field(default_factory=list)
    corpus: List[str] = Field(default_factory=list)
    model_name: str = "default"
    min_tokens: int = Field(default=settings.MIN_CHAIN_TOKENS, ge=1)
    reset: bool = False


class GenerateRequest(BaseModel):
    model_name: str = "default"
    count: int = Field(default=1, ge=1, le=100)
    max_steps: Optional[int] = Field(default=None, ge=1)


def _get_model(model_name: str) -> ChainModel:
    model = MODEL_CACHE.get(model_name)
    if model is None:
        raise HTTPException(status_code=404, detail="model not found, train first")
    return model


@router.post("/train")
async def train(req: TrainRequest):
    if not req.chains and not req.corpus:
        raise HTTPException(status_code=400, detail="chains or corpus required")

    model = MODEL_CACHE.get(req.model_name)
    if model is None or req.reset:
        model = train_from_chains(req.chains)
        added = model.chain_count
    else:
        added = model.add_chains(req.chains)

    added += add_records(model, req.corpus, min_tokens=req.min_tokens)
    MODEL_CACHE[req.model_name] = model

    stats = model.get_stats()
    logger.info(f"[Markov] Trained '{req.model_name}': +{added} chains, {stats.node_count} nodes")
    return {
        "ok": True,
        "model": req.model_name,
        "added": added,
        "nodes": stats.node_count,
        "edges": stats.edge_count,
    }


@router.post("/generate")
async def generate(req: GenerateRequest):
    model = _get_model(req.model_name)
    if not model.start_edges:
        raise HTTPException(status_code=400, detail="model has no chains")

    max_steps = req.max_steps or max_steps_or_none(settings.GENERATE_MAX_STEPS)
    results = [model.generate(max_steps=max_steps) for _ in range(req.count)]
    return {
        "ok": True,
        "data": {
            "tokens": results,
            "texts": [" ".join(tokens) for tokens in results],
        },
    }


@router.get("/export", response_class=PlainTextResponse)
async def export(model_name: str = "default"):
    model = _get_model(model_name)
    return PlainTextResponse(model.export(), media_type="text/vnd.graphviz")


@router.get("/stats")
async def stats(model_name: str = "default"):
    model = _get_model(model_name)
    s = model.get_stats()
    return {
        "ok": True,
        "data": {
            "model": model_name,
            "nodes": s.node_count,
            "edges": s.edge_count,
            "start_edges": s.start_count,
            "chains": s.chain_count,
            "transitions": s.transition_count,
        },
    }


@router.delete("/{model_name}")
async def delete_model(model_name: str):
    _get_model(model_name)
    del MODEL_CACHE[model_name]
    logger.info(f"[Markov] Dropped '{model_name}'")
    return {"ok": True, "model": model_name}
