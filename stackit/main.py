import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from stackit.config.settings import CORS_ORIGINS
from stackit.config.database import ensure_indexes
from stackit.router import user_router, question_router, answer_router

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        ensure_indexes()
        logger.info("Database indexes ensured")
    except Exception as e:
        logger.error(f"Error creating database indexes: {str(e)}")
        raise
    yield


# Initialize FastAPI app and handle Middleware
app = FastAPI(title="StackIt Q&A API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every error body is {"message": ...}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        problems.append(f"{location}: {error['msg']}" if location else error["msg"])
    return JSONResponse(status_code=400, content={"message": "; ".join(problems)})


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# Health check endpoint
@app.get("/health")
def health_check():
    return {"status": "healthy"}


# Include routers from each service module
app.include_router(user_router, prefix="/api/users", tags=["User"])
app.include_router(question_router, prefix="/api/questions", tags=["Question"])
app.include_router(answer_router, prefix="/api/answers", tags=["Answer"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("stackit.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
