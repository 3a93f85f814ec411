from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer

from .app.logging import setup_logging
from .app.settings import get_portal_settings
from .client.http import DocumentClient
from .client.intake import PatientIntakeForm, render_intake_pdf
from .client.workspace import DocumentWorkspace, format_file_size
from .db.engine import DBEngine
from .db.settings import get_db_settings
from .documents.metadata import MetadataStore
from .documents.reconcile import ORPHAN_GRACE_SECONDS, ReconcileReport, reconcile
from .storage.local import LocalBlobStore

app = typer.Typer(no_args_is_help=True, add_completion=False, help="Medical document portal.")


def _client(api_base: Optional[str]) -> DocumentClient:
    return DocumentClient(api_base or get_portal_settings().api_base)


def _report(workspace: DocumentWorkspace) -> None:
    msg = workspace.message
    if msg is None:
        return
    if msg.kind == "error":
        typer.echo(f"ERROR {msg.text}", err=True)
        raise typer.Exit(code=1)
    typer.echo(msg.text)


ApiBase = typer.Option(None, "--api-base", help="API base URL; defaults to PORTAL_API_BASE")


@app.command("serve")
def serve(
        host: Optional[str] = typer.Option(None, help="Bind host; defaults to PORTAL_HOST"),
        port: Optional[int] = typer.Option(None, help="Bind port; defaults to PORTAL_PORT"),
        reload: bool = typer.Option(False, help="Auto-reload on code changes"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_portal_settings()
    setup_logging()
    uvicorn.run(
        "medportal.api.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
    )


@app.command("init-db")
def init_db():
    """Create the documents table and the storage directory if missing."""
    settings = get_portal_settings()

    async def run() -> None:
        engine = DBEngine(get_db_settings())
        try:
            await engine.create_all()
        finally:
            await engine.dispose()

    LocalBlobStore(settings.storage_root).ensure_root()
    asyncio.run(run())
    typer.echo(f"Schema ready; storage at {settings.storage_root}")


@app.command("list")
def list_cmd(api_base: Optional[str] = ApiBase):
    """List stored documents, newest first."""
    with _client(api_base) as client:
        ws = DocumentWorkspace(client)
        ws.refresh()
        _report(ws)
        if not ws.documents:
            typer.echo("No documents.")
            return
        for doc in ws.documents:
            typer.echo(
                f"{doc.id}\t{doc.original_filename}\t{format_file_size(doc.size_bytes)}\t"
                f"{doc.created_at:%Y-%m-%d %H:%M:%S}"
            )


@app.command("upload")
def upload(
        path: Path = typer.Argument(..., exists=True, dir_okay=False, help="PDF file to upload"),
        api_base: Optional[str] = ApiBase,
):
    """Upload an existing PDF."""
    with _client(api_base) as client:
        ws = DocumentWorkspace(client)
        ws.upload_file(path)
        _report(ws)


@app.command("download")
def download(
        document_id: int = typer.Argument(...),
        output: Path = typer.Option(Path("."), "--output", "-o", file_okay=False, help="Target directory"),
        api_base: Optional[str] = ApiBase,
):
    """Download a document, saved under its original filename."""
    output.mkdir(parents=True, exist_ok=True)
    with _client(api_base) as client:
        ws = DocumentWorkspace(client)
        ws.download(document_id, output)
        _report(ws)


@app.command("delete")
def delete(
        document_id: int = typer.Argument(...),
        api_base: Optional[str] = ApiBase,
):
    """Delete a document and its stored file."""
    with _client(api_base) as client:
        ws = DocumentWorkspace(client)
        ws.delete(document_id)
        _report(ws)


@app.command("intake")
def intake(
        form_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with intake fields"),
        save: Optional[Path] = typer.Option(None, help="Only render the PDF to this path, do not upload"),
        api_base: Optional[str] = ApiBase,
):
    """Render a patient intake form to PDF and upload it."""
    try:
        form = PatientIntakeForm.model_validate(json.loads(form_file.read_text(encoding="utf-8")))
    except ValueError as exc:
        typer.echo(f"ERROR invalid intake form: {exc}", err=True)
        raise typer.Exit(code=2)

    if save is not None:
        save.write_bytes(render_intake_pdf(form))
        typer.echo(f"Wrote {save}")
        return

    with _client(api_base) as client:
        ws = DocumentWorkspace(client)
        ws.generate_and_upload(form)
        _report(ws)


@app.command("reconcile")
def reconcile_cmd(
        prune_orphans: bool = typer.Option(False, help="Delete blobs that no record references"),
        drop_dangling: bool = typer.Option(False, help="Delete records whose blob is missing"),
        grace_seconds: float = typer.Option(
            ORPHAN_GRACE_SECONDS, help="Unreferenced blobs younger than this are left alone"
        ),
):
    """Compare the storage directory with the documents table."""
    settings = get_portal_settings()

    async def run() -> ReconcileReport:
        engine = DBEngine(get_db_settings())
        try:
            return await reconcile(
                MetadataStore(engine),
                LocalBlobStore(settings.storage_root),
                prune_orphans=prune_orphans,
                drop_dangling=drop_dangling,
                grace_seconds=grace_seconds,
            )
        finally:
            await engine.dispose()

    report = asyncio.run(run())
    for key in report.orphan_blobs:
        state = "pruned" if key in report.pruned_blobs else "kept"
        typer.echo(f"orphan blob\t{key}\t{state}")
    for document_id in report.dangling_records:
        state = "dropped" if document_id in report.dropped_records else "kept"
        typer.echo(f"dangling record\t{document_id}\t{state}")
    for key in report.recent_blobs:
        typer.echo(f"recent blob\t{key}\tskipped")
    if report.clean:
        typer.echo("Storage and metadata agree.")
