"""
HTTP surface for the clustering pipeline.
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .schemas import ClusterRequest, ClusterResponse, FlowOut, HealthResponse
from ..core import config
from ..core.errors import ConfigError, EmbeddingError, VectorIndexError
from ..core.pipeline import harvest
from ..util.logging import logger

app = FastAPI(
    title="Flow Harvester API",
    version=config.VERSION,
    description="Groups exported conversations into disjoint topical flows",
    docs_url="/docs" if config.debug_enabled() else None,
    redoc_url="/redoc" if config.debug_enabled() else None
)

# Allow the local dashboard to call the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint():
    """Check configuration health."""
    issues = config.validate_config()
    return HealthResponse(
        status="healthy" if not issues else "degraded",
        version=config.VERSION,
        index_backend=config.get_index_backend(),
        config_issues=issues
    )


@app.post("/cluster", response_model=ClusterResponse)
def cluster_endpoint(request: ClusterRequest):
    """Cluster the posted messages into flows.

    Uses a new store per request; with the file backend that store is
    loaded from and flushed to the configured index path.
    """
    try:
        store = config.get_vector_store()
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=str(e))

    raw_messages = [m.model_dump(exclude_none=True) for m in request.messages]
    overrides = {}
    if request.neighbor_k is not None:
        overrides["neighbor_k"] = request.neighbor_k
    if request.seed_cap is not None:
        overrides["seed_cap"] = request.seed_cap

    try:
        result = harvest(raw_messages, store=store, **overrides)
    except EmbeddingError as e:
        raise HTTPException(status_code=422, detail=f"Embedding failed: {e}")
    except VectorIndexError as e:
        raise HTTPException(status_code=503, detail=f"Vector index unavailable: {e}")

    logger.log_operation("api.cluster", "success", {
        "message_count": len(result.messages),
        "flow_count": len(result.flows),
    })

    return ClusterResponse(
        message_count=len(result.messages),
        topic_count=len(result.topics),
        flows=[FlowOut(**flow.to_dict()) for flow in result.flows]
    )
