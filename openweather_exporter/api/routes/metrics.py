from fastapi import APIRouter, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get(
    "",
    summary="Prometheus scrape endpoint",
    response_class=Response,
    responses={200: {"content": {CONTENT_TYPE_LATEST: {}}, "description": "Metrics in text exposition format"}},
)
def metrics(request: Request) -> Response:
    # Sync route: each scrape runs on its own worker thread, fetches block it only.
    body = generate_latest(request.app.state.registry)
    return Response(content=body, media_type=CONTENT_TYPE_LATEST)
