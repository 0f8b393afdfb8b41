from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from habitflow.core.config import settings
from habitflow.core.database import engine, Base
from habitflow.core.errors import StorageError
from habitflow.core.logging_config import setup_logging
from habitflow.routers import health, auth, habits, tasks, today, history
from habitflow.routers import profile as profile_router
from habitflow.services.events import UserChannels

# Init DB
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Habitflow API",
    version="1.0.0"
)
setup_logging(app)

# Un bus d'événements + porte de célébration par utilisateur
app.state.channels = UserChannels(cooldown_seconds=settings.CELEBRATION_COOLDOWN_SECONDS)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


# Routes
app.include_router(health.router, prefix="/health")
app.include_router(auth.router)
app.include_router(habits.router)
app.include_router(tasks.router)
app.include_router(today.router)
app.include_router(history.router)
app.include_router(profile_router.router)
