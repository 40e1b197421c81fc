from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from dotenv import load_dotenv

# Import all route modules
from api.routes import auth, repos, metrics
from utils.logger import get_logger
from core.config import settings
from core.github import GitHubAPIError, RateLimitExceededError
from core.github.errors import RATE_LIMIT_MESSAGE

load_dotenv()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting repo-insights-relay")
    settings.validate()
    yield
    logger.info("Shutting down repo-insights-relay")


app = FastAPI(
    title="Repository Insights Relay",
    description="Relay GitHub repository data and aggregate pull request trends",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RateLimitExceededError)
async def rate_limit_handler(request: Request, exc: RateLimitExceededError):
    return JSONResponse(status_code=403, content={"error": RATE_LIMIT_MESSAGE})


@app.exception_handler(GitHubAPIError)
async def github_error_handler(request: Request, exc: GitHubAPIError):
    return JSONResponse(status_code=500, content={"error": exc.message})


app.include_router(auth.router, tags=["auth"])
app.include_router(repos.router, tags=["repositories"])
app.include_router(metrics.router, tags=["metrics"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "repo-insights-relay"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
