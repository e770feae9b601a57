from fasthtml.common import APIRouter
from starlette.responses import JSONResponse

rt = APIRouter()

HEALTH = {"status": "healthy", "app": "demo_phoenix", "type": "phoenix_liveview"}


@rt("/health", methods=["get"])
def health():
    return JSONResponse(HEALTH)
