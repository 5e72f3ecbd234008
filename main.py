from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from untrivially.core.config import settings
from untrivially.core.log import get_logger
from untrivially.routes.auth.auth_routers import auth_router
from untrivially.routes.quiz.quiz_routers import quiz_router

log = get_logger("untrivially")

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="An interactive quiz application that allows users to create, manage, and take quizzes.",
    version=settings.API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(quiz_router)

log.info("application configured", extra={"environment": settings.ENVIRONMENT})


@app.get("/")
def read_root():
    return {"message": "Welcome to Untrivially API!", "docs": "/docs"}
