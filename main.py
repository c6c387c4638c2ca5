from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

import logging
from contextlib import asynccontextmanager

from services.comment_store import CommentStore
from services.kv import FirestoreKeyValueStore, create_kv_store
from settings import settings

# Import routers
from routers import comments

logger = logging.getLogger('uvicorn.error')


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup: Initializing resources...")
    try:
        kv = create_kv_store(settings.kv_backend, settings.kv_collection)
        app.state.comment_store = CommentStore(kv, default_author=settings.default_author)
        logger.info(f"Comment store initialized with '{settings.kv_backend}' backend.")
    except Exception as e:
        logger.error(f"Failed to initialize comment store: {e}")
        app.state.comment_store = None

    yield
    logger.info("Application shutdown: Cleaning up resources...")
    store = getattr(app.state, 'comment_store', None)
    if store and isinstance(store.kv, FirestoreKeyValueStore):
        try:
            await store.kv.db.close() # Close the async client
            logger.info("Firestore Async client closed.")
        except Exception as e:
             logger.error(f"Error closing Firestore client: {e}")


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.include_router(comments.router)

app.add_middleware(
    TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)
