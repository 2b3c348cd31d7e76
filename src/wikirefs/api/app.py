"""FastAPI application exposing reference block status and updates."""

import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .. import __version__
from ..errors import WikirefsError
from ..runtime import Runtime
from ..workspace import TextDocument


def create_app(runtime: Runtime, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with vault, graph and workspace
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="wikirefs API",
        description="Local JSON API for wikilink reference blocks",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    async def open_note(note_id: str) -> TextDocument:
        await runtime.ensure_started()
        path = runtime.vault.storage.path_for(note_id)
        if not path.exists():
            raise HTTPException(status_code=404, detail=f"Note {note_id} not found")
        # Always read the file fresh; the API holds no open buffers
        doc = runtime.workspace.documents.get(path.resolve())
        if doc is not None:
            runtime.workspace.close_document(doc)
        return runtime.workspace.open_document(path, activate=False)

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    @app.get("/notes/{note_id}/references")
    async def get_references(note_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Status of a note's reference block and its canonical lines."""
        doc = await open_note(note_id)
        try:
            status = await runtime.evaluator.evaluate(doc)
            refs = await runtime.generator.generate(doc.id, doc.get_text())
        except WikirefsError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e
        finally:
            runtime.workspace.close_document(doc)

        return {
            "id": note_id,
            "block": None if status is None else {
                "start_line": status.range.start_line,
                "end_line": status.range.end_line,
                "status": status.status,
                "title": status.title,
            },
            "references": refs,
        }

    @app.post("/notes/{note_id}/references")
    async def update_references(note_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Synchronize a note's reference block and save it."""
        doc = await open_note(note_id)
        try:
            result = await runtime.engine.synchronize(doc)
            if result.changed:
                await runtime.workspace.save(doc)
        except WikirefsError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e
        finally:
            runtime.workspace.close_document(doc)

        return {
            "id": note_id,
            "action": result.action,
            "changed": result.changed,
            "references": result.references,
        }

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
