from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request) -> dict:
    state = request.app.state

    return {
        "status": "ok",
        "document_source": type(getattr(state, "document_source", None)).__name__,
        "cache": getattr(state, "cache", None) is not None,
    }
