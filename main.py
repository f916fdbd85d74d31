import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.utils.settings import LOG_LEVEL
from api.v1.routes import api_version_one

logger = logging.getLogger("math-battle-engine")
logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))

app = FastAPI(title="Math Battle – Question Engine API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(api_version_one)
