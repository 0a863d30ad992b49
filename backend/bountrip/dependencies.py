from fastapi import HTTPException, Request, status

from bountrip.services.llm import LLMDispatcher


def get_dispatcher(request: Request) -> LLMDispatcher:
    """Return the dispatcher created during app startup."""
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI service is not ready",
        )
    return dispatcher
