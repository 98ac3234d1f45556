import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from .api_models import (
    CatalogResponse,
    ConfirmationResponse,
    FieldValueRequest,
    ItemValueRequest,
    SessionResponse,
    SubmitResponse,
)
from .catalog import load_catalog
from .config import Settings, get_settings
from .confirmation import build_confirmation, load_display_names
from .exceptions import (
    FormClosedError,
    HandoffStoreError,
    HiddenFieldError,
    InvalidValueError,
    SessionNotFoundError,
    UnknownFieldError,
)
from .handoff import HandoffStore
from .logging_config import setup_logging
from .request_context import set_request_id, with_request_id
from .sessions import SessionRegistry

logger = logging.getLogger(__name__)


@contextmanager
def translate_errors() -> Iterator[None]:
    """Map engine faults raised inside a route to HTTP errors."""
    try:
        yield
    except (SessionNotFoundError, UnknownFieldError) as exc:
        raise HTTPException(status_code=404, detail=with_request_id(str(exc))) from exc
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=with_request_id(str(exc))) from exc
    except (HiddenFieldError, InvalidValueError) as exc:
        raise HTTPException(status_code=400, detail=with_request_id(str(exc))) from exc
    except FormClosedError as exc:
        raise HTTPException(status_code=409, detail=with_request_id(str(exc))) from exc
    except HandoffStoreError as exc:
        error_msg = f"Hand-off store failed: {exc}"
        raise HTTPException(status_code=503, detail=with_request_id(error_msg)) from exc


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    # A broken catalog raises ConfigurationError here, before anything is served.
    catalog = load_catalog(settings.catalog_path)
    display_names = load_display_names(settings.display_names_path)
    registry = SessionRegistry(catalog)
    store = HandoffStore(path=settings.sqlite_path, key=settings.handoff_key)

    app = FastAPI(title="Dynaform API", version="0.1.0")
    app.state.registry = registry
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Add request ID to context for all requests."""
        request_id = set_request_id(request.headers.get("X-Request-ID"))
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/api/catalog", response_model=CatalogResponse)
    async def get_field_catalog():
        return CatalogResponse(fields=list(catalog.fields))

    @app.post("/api/sessions", response_model=SessionResponse, status_code=201)
    async def mount_session():
        session_id, engine = registry.mount()
        return SessionResponse(session_id=session_id, view=engine.render())

    @app.get("/api/sessions/{session_id}", response_model=SessionResponse)
    async def get_session(session_id: str):
        with translate_errors():
            engine = registry.get(session_id)
        return SessionResponse(session_id=session_id, view=engine.render())

    @app.delete("/api/sessions/{session_id}", status_code=204)
    async def unmount_session(session_id: str):
        with translate_errors():
            registry.unmount(session_id)

    @app.put("/api/sessions/{session_id}/fields/{name}", response_model=SessionResponse)
    async def set_field(session_id: str, name: str, body: FieldValueRequest):
        with translate_errors():
            engine = registry.get(session_id)
            engine.set_value(name, body.value)
        return SessionResponse(session_id=session_id, view=engine.render())

    @app.post("/api/sessions/{session_id}/lists/{key}/items", response_model=SessionResponse)
    async def append_item(session_id: str, key: str):
        with translate_errors():
            engine = registry.get(session_id)
            engine.append_item(key)
        return SessionResponse(session_id=session_id, view=engine.render())

    @app.put("/api/sessions/{session_id}/lists/{key}/items/{index}", response_model=SessionResponse)
    async def set_item(session_id: str, key: str, index: int, body: ItemValueRequest):
        with translate_errors():
            engine = registry.get(session_id)
            engine.set_item(key, index, body.value)
        return SessionResponse(session_id=session_id, view=engine.render())

    @app.delete("/api/sessions/{session_id}/lists/{key}/items/{index}", response_model=SessionResponse)
    async def remove_item(session_id: str, key: str, index: int):
        with translate_errors():
            engine = registry.get(session_id)
            engine.remove_item(key, index)
        return SessionResponse(session_id=session_id, view=engine.render())

    @app.post("/api/sessions/{session_id}/submit", response_model=SubmitResponse)
    async def submit(session_id: str):
        with translate_errors():
            engine = registry.get(session_id)
            result = await registry.submit(session_id, store)

        if not result.valid:
            return SubmitResponse(
                session_id=session_id,
                valid=False,
                errors=result.errors,
                error_kinds=result.error_kinds,
                view=engine.render(),
            )
        return SubmitResponse(session_id=session_id, valid=True, values=result.values)

    @app.get("/api/sessions/{session_id}/confirmation", response_model=ConfirmationResponse)
    async def confirmation(session_id: str):
        with translate_errors():
            record = await store.read(session_id)
        return ConfirmationResponse(
            session_id=session_id,
            entries=build_confirmation(record, display_names),
        )

    return app


app = create_app()
