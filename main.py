"""
Entry point for the wrong-question-notebook review service.

Run with:
    python main.py
    wqn serve
"""
import uvicorn

from config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "wqn.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
