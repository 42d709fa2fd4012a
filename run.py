import uvicorn
import os

from mayspace.core.config import settings

if __name__ == "__main__":
    host = os.environ.get("HOST", settings.HOST)
    port = int(os.environ.get("PORT", settings.PORT))

    # Disable reload in production
    reload = os.getenv("ENV") == "development"

    uvicorn.run(
        "mayspace.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.LOG_LEVEL.lower(),
    )
