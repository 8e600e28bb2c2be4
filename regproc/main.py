from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from regproc.api.routes import router
from regproc.api.admin_routes import router as admin_router
from regproc.settings import settings

app = FastAPI(title="Registration Processor: proxy validation & workflow actions")

origins = [x.strip() for x in settings.CORS_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(admin_router)


@app.get("/health")
def health():
    return {"status": "ok"}
