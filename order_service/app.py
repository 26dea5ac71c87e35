import logging
from contextlib import asynccontextmanager, contextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from platform_common.auth import AuthContext, TokenVerifier
from platform_common.errors import (
    BadRequest,
    Internal,
    NotFound,
    ServiceError,
    Unavailable,
    install_error_handlers,
)
from platform_common.log_config import configure_logging

from . import config
from .database import Base, engine as default_engine
from .identity import IdentityClient
from .schemas import CreateOrderRequest, OrderResponse, UpdateStatusRequest
from .store import OrderStore

SERVICE_NAME = "order-service"

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(operation: str):
    """Client-facing errors pass through; storage and unexpected failures become a bare 500."""
    try:
        yield
    except Unavailable as e:
        logger.error(f"{operation} failed: {e.message}")
        raise Internal()
    except ServiceError:
        raise
    except Exception:
        logger.exception(f"{operation} failed")
        raise Internal()


def create_app(verifier: TokenVerifier, identity: IdentityClient, engine=default_engine) -> FastAPI:
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("Database initialized")
        except Exception as e:
            # Keep serving; /health reports the database as disconnected
            logger.error(f"Database initialization error: {e}")
        yield

    app = FastAPI(title="Order Service", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    require_auth = verifier.dependency()

    def get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def get_store(db: Session = Depends(get_db)) -> OrderStore:
        return OrderStore(db)

    @app.get("/health")
    def health(store: OrderStore = Depends(get_store)):
        try:
            store.ping()
        except Unavailable:
            return JSONResponse(status_code=503, content={
                "status": "error",
                "service": SERVICE_NAME,
                "db": "disconnected",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            })
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "db": "connected",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/api/orders", response_model=List[OrderResponse])
    def list_orders(
        auth: AuthContext = Depends(require_auth),
        store: OrderStore = Depends(get_store),
    ):
        with store_errors("Get orders"):
            return store.list_by_user(auth.user_id)

    @app.post("/api/orders", response_model=OrderResponse, status_code=201)
    def create_order(
        order_request: Optional[CreateOrderRequest] = None,
        auth: AuthContext = Depends(require_auth),
        store: OrderStore = Depends(get_store),
    ):
        if order_request is None or not order_request.items or not order_request.totalAmount:
            raise BadRequest("Missing required fields")

        # Synchronous, bounded check; no order row is written unless it passes.
        if not identity.exists(auth.user_id, auth.authorization):
            raise NotFound("User not found")

        with store_errors("Create order"):
            return store.create(auth.user_id, order_request.items, order_request.totalAmount)

    @app.get("/api/orders/{order_id}", response_model=OrderResponse)
    def get_order(
        order_id: int,
        auth: AuthContext = Depends(require_auth),
        store: OrderStore = Depends(get_store),
    ):
        with store_errors("Get order"):
            return store.get_by_id_for_user(order_id, auth.user_id)

    @app.put("/api/orders/{order_id}/status", response_model=OrderResponse)
    def update_order_status(
        order_id: int,
        update: Optional[UpdateStatusRequest] = None,
        auth: AuthContext = Depends(require_auth),
        store: OrderStore = Depends(get_store),
    ):
        if update is None or not update.status:
            raise BadRequest("Status required")
        with store_errors("Update order"):
            return store.update_status(order_id, auth.user_id, update.status)

    return app


configure_logging(SERVICE_NAME)

app = create_app(
    verifier=TokenVerifier(config.JWT_SECRET, config.JWT_ALGORITHM),
    identity=IdentityClient(config.USER_SERVICE_URL, timeout=config.IDENTITY_TIMEOUT_SECONDS),
)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
