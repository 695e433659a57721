# AGPL-3.0 License

"""
HTTP endpoint Drone calls to fetch the configuration of a build.
"""

import uuid
from typing import Optional

import uvicorn
from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from tree_config.config_loader import get_settings
from tree_config.errors import TreeConfigError
from tree_config.log import LoggingFormat, get_logger, setup_logger
from tree_config.path_config import Build, ConfigFinder, Repo
from tree_config.path_config import Request as ConfigRequest
from tree_config.scm_clients import get_scm_client
from tree_config.servers.signature import verify_signature

router = APIRouter()

_config_finder: Optional[ConfigFinder] = None


class RepoPayload(BaseModel):
    namespace: str
    name: str
    config_path: str = ""
    default_branch: str = ""


class BuildPayload(BaseModel):
    before: str = ""
    after: str
    ref: str = ""
    trigger: str = ""
    fork: str = ""
    source: str = ""


class ConfigPayload(BaseModel):
    """Config extension request body; fields Drone sends that are not needed are ignored."""
    repo: RepoPayload
    build: BuildPayload


def get_config_finder() -> ConfigFinder:
    """Get or create the plugin-wide config finder."""
    global _config_finder
    if _config_finder is None:
        _config_finder = ConfigFinder()
    return _config_finder


def _resolve(payload: ConfigPayload) -> Optional[str]:
    request_id = uuid.uuid4()
    repo = Repo(
        namespace=payload.repo.namespace,
        name=payload.repo.name,
        config=payload.repo.config_path,
        branch=payload.repo.default_branch,
    )
    build = Build(
        before=payload.build.before,
        after=payload.build.after,
        ref=payload.build.ref,
        trigger=payload.build.trigger,
        fork=payload.build.fork,
        source=payload.build.source,
    )
    client = get_scm_client(request_id, repo.namespace, repo.name)
    return get_config_finder().find(ConfigRequest(repo=repo, build=build, client=client, uuid=request_id))


@router.post("/")
async def handle_config_request(request: Request):
    body = await request.body()

    secret = get_settings().get("server.secret", "")
    if secret:
        path = request.url.path + (f"?{request.url.query}" if request.url.query else "")
        if not verify_signature(request.method, path, request.headers, body, secret):
            get_logger().warning("Rejected request with an invalid or missing signature")
            raise HTTPException(status_code=400, detail="Invalid or Missing Signature")

    try:
        payload = ConfigPayload.model_validate_json(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid request body: {e.error_count()} errors")

    try:
        config = await run_in_threadpool(_resolve, payload)
    except TreeConfigError as e:
        return Response(content=str(e), status_code=404, media_type="text/plain")

    if config is None:
        return Response(status_code=204)
    return JSONResponse({"data": config})


@router.get("/healthz")
async def health_check():
    return {"status": "ok"}


app = FastAPI(
    title="tree-config",
    description="Drone config extension discovering pipeline files next to changed code",
)
app.include_router(router)


def start():
    settings = get_settings()
    setup_logger(
        settings.get("config.log_level", "INFO"),
        LoggingFormat(settings.get("config.log_format", "CONSOLE").upper()),
    )
    uvicorn.run(app, host=settings.get("server.host", "0.0.0.0"), port=int(settings.get("server.port", 3000)))


if __name__ == '__main__':
    start()
