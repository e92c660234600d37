from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
import store
from routes import activity, screen_time, screens


@asynccontextmanager
async def lifespan(app: FastAPI):
    await store.recorder.record_app_started()
    yield


app = FastAPI(title="MindFlow Activity API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(activity.router)
app.include_router(screens.router)
app.include_router(screen_time.router)


@app.get("/")
def health():
    return {"status": "ok", "service": "mindflow-activity"}
