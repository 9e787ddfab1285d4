"""
Main application entry point for LogJournal.

This module provides the CLI for managing log entries, checklist
templates, export templates and document exports.
"""

import functools
import json
import mimetypes
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

import click

from .checklist import apply_template, checklist_progress, merge_checklist_items, validate_entry
from .core.exceptions import LogJournalError
from .core.logging import get_logger, setup_logging
from .editor import LogEditor
from .export import ExportService, LocalFileDelivery, build_renderers, render_preview
from .export.formatting import format_date, format_size_kb
from .settings import AppSettings, get_settings, load_settings
from .store import DRAFT, FileBlobStore, LogStore, PersistedTarget
from .store.schemas import (
    AttachmentCreate, ChecklistItem, ChecklistItemCreate, EditTarget, ExportFormat,
    ExportTemplate, ExportTemplateCreate, ExportTemplatePatch, LogEntry, LogEntryCreate,
    LogEntryPatch, LogTemplateCreate, LogTemplatePatch
)


logger = get_logger(__name__)


class CliContext:
    """Settings and lazily opened store shared by every command."""

    def __init__(self, settings: AppSettings):
        self.settings = settings
        self._store: Optional[LogStore] = None

    @property
    def store(self) -> LogStore:
        if self._store is None:
            self._store = LogStore(
                FileBlobStore(self.settings.storage.data_dir),
                namespace=self.settings.storage.namespace
            )
        return self._store

    def export_service(self, output_dir: Optional[Path] = None) -> ExportService:
        return ExportService(
            self.store,
            build_renderers(self.settings.export),
            LocalFileDelivery(output_dir or self.settings.export.output_dir)
        )


def handle_errors(func):
    """Report application errors as a message and exit status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LogJournalError as e:
            logger.error(f"{func.__name__} failed: {e.message}")
            click.echo(f"❌ {e.message}", err=True)
            sys.exit(1)
    return wrapper


def resolve_target(log_id: Optional[str], use_draft: bool) -> EditTarget:
    """Turn the --log / --draft options into an edit target."""
    if bool(log_id) == use_draft:
        raise click.UsageError("Pass exactly one of --log or --draft")
    return DRAFT if use_draft else PersistedTarget(log_id)


def target_options(func):
    func = click.option('--draft', 'use_draft', is_flag=True, help='Edit the draft')(func)
    return click.option('--log', 'log_id', help='Saved entry to edit')(func)


def fail(message: str) -> None:
    click.echo(f"❌ {message}", err=True)
    sys.exit(1)


def describe_entry(entry: LogEntry) -> str:
    checked, total = checklist_progress(entry.checklist_items)
    return f"{entry.id}  {format_date(entry.created_at)}  {entry.title}  [{checked}/{total}]"


def enabled_sections(template: ExportTemplate) -> List[str]:
    return [
        name for name, enabled in (
            ("header", template.include_header),
            ("footer", template.include_footer),
            ("checklist", template.include_checklist),
            ("attachments", template.include_attachments),
        ) if enabled
    ]


def echo_checklist(items: List[ChecklistItem]) -> None:
    for item in items:
        mark = "x" if item.checked else " "
        required = " *" if item.required else ""
        click.echo(f"  [{mark}] {item.text}{required}  ({item.id})")


@click.group()
@click.version_option(package_name="logjournal")
@click.option('--config', '-c', type=click.Path(exists=True, path_type=Path), help='Configuration file path')
@click.option('--data-dir', type=click.Path(file_okay=False, path_type=Path), help='Directory holding the store')
@click.option('--debug', '-d', is_flag=True, help='Enable debug mode')
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], data_dir: Optional[Path], debug: bool):
    """LogJournal - work log entries with checklists and document export."""
    settings = load_settings(yaml_path=config) if config else get_settings()

    if data_dir:
        settings = settings.model_copy(update={
            "storage": settings.storage.model_copy(update={"data_dir": data_dir})
        })
    if debug:
        settings = settings.model_copy(update={
            "debug": True,
            "logging": settings.logging.model_copy(update={"level": "DEBUG"})
        })

    setup_logging(settings.logging, "logjournal")
    if config:
        logger.info(f"Using configuration file: {config}")

    ctx.obj = CliContext(settings)


# Log entries

@cli.group()
def logs():
    """Manage log entries."""


@logs.command("list")
@click.option('--json', 'as_json', is_flag=True, help='Print entries as JSON')
@click.pass_obj
def list_logs(obj: CliContext, as_json: bool):
    """List log entries, newest first."""
    entries = obj.store.logs
    if as_json:
        click.echo(json.dumps(
            [entry.model_dump(mode="json", by_alias=True) for entry in entries],
            ensure_ascii=False, indent=2
        ))
        return
    if not entries:
        click.echo("No log entries.")
        return
    for entry in entries:
        click.echo(describe_entry(entry))


@logs.command("show")
@click.argument('log_id')
@click.option('--template', '-t', 'template_id', help='Export template controlling the preview sections')
@click.pass_obj
def show_log(obj: CliContext, log_id: str, template_id: Optional[str]):
    """Preview a log entry."""
    entry = obj.store.get_log(log_id)
    if entry is None:
        fail(f"Log entry not found: {log_id}")

    template = None
    if template_id:
        template = obj.store.get_export_template(template_id)
        if template is None:
            fail(f"Export template not found: {template_id}")

    click.echo(render_preview(entry, template))


@logs.command("add")
@click.option('--title', required=True, help='Entry title')
@click.option('--content', default='', help='Entry body')
@click.option('--template', '-t', 'template_id', help='Log template whose checklist is merged in')
@click.option('--item', 'items', multiple=True, help='Checklist item text')
@click.option('--required', 'required_items', multiple=True, help='Required checklist item text')
@click.option('--check', 'checked', multiple=True, help='Mark the item with this text as checked')
@click.pass_obj
@handle_errors
def add_log(obj: CliContext, title: str, content: str, template_id: Optional[str],
            items: Tuple[str, ...], required_items: Tuple[str, ...], checked: Tuple[str, ...]):
    """Create a log entry."""
    store = obj.store

    own_items = [ChecklistItem(id="", text=text) for text in items]
    own_items += [ChecklistItem(id="", text=text, required=True) for text in required_items]
    checklist = merge_checklist_items([], own_items)

    if template_id:
        template = store.get_template(template_id)
        if template is None:
            fail(f"Log template not found: {template_id}")
        checklist = merge_checklist_items(checklist, template.checklist_items)

    checklist = [
        item.model_copy(update={"checked": item.text in checked}) for item in checklist
    ]

    validate_entry(title, checklist)
    log_id = store.create_log(LogEntryCreate(
        title=title, content=content, checklist_items=checklist, template_id=template_id
    ))
    click.echo(f"✅ Created log entry {log_id}")


@logs.command("edit")
@click.argument('log_id')
@click.option('--title', help='New title')
@click.option('--content', help='New body')
@click.option('--template', '-t', 'template_id', help='Apply a log template checklist first')
@click.pass_obj
@handle_errors
def edit_log(obj: CliContext, log_id: str, title: Optional[str], content: Optional[str],
             template_id: Optional[str]):
    """Edit a saved log entry."""
    store = obj.store
    values = {}
    if title is not None:
        values["title"] = title
    if content is not None:
        values["content"] = content

    if template_id:
        template = store.get_template(template_id)
        if template is None:
            fail(f"Log template not found: {template_id}")
        entry = store.get_log(log_id)
        existing = entry.checklist_items if entry else []
        values["checklist_items"] = merge_checklist_items(existing, template.checklist_items)
        values["template_id"] = template_id

    # Nothing is written unless the merged result validates.
    LogEditor(store).submit(PersistedTarget(log_id), LogEntryPatch(**values))
    click.echo(f"✅ Updated log entry {log_id}")


@logs.command("delete")
@click.argument('log_id')
@click.pass_obj
def delete_log(obj: CliContext, log_id: str):
    """Delete a log entry."""
    if not obj.store.delete_log(log_id):
        fail(f"Log entry not found: {log_id}")
    click.echo(f"🗑️  Deleted log entry {log_id}")


@logs.command("toggle")
@click.argument('item_id')
@target_options
@click.pass_obj
def toggle_item(obj: CliContext, item_id: str, log_id: Optional[str], use_draft: bool):
    """Toggle a checklist item on a saved entry or the draft."""
    target = resolve_target(log_id, use_draft)
    if not obj.store.toggle_checklist_item(target, item_id):
        fail(f"Checklist item {item_id} not found on {target}")
    click.echo(f"✅ Toggled checklist item {item_id}")


@logs.command("attach")
@click.argument('name')
@target_options
@click.option('--size', type=int, help='Size in bytes (read from the file when NAME is a path)')
@click.option('--mime-type', help='MIME type (guessed from the name when omitted)')
@click.option('--url', default='', help='Where the attachment is stored')
@click.pass_obj
def attach(obj: CliContext, name: str, log_id: Optional[str], use_draft: bool,
           size: Optional[int], mime_type: Optional[str], url: str):
    """Attach file metadata to a saved entry or the draft."""
    target = resolve_target(log_id, use_draft)
    path = Path(name)
    if path.is_file():
        size = path.stat().st_size if size is None else size
        url = url or path.resolve().as_uri()

    attachment_id = obj.store.add_attachment(target, AttachmentCreate(
        name=path.name,
        mime_type=mime_type or mimetypes.guess_type(path.name)[0] or "application/octet-stream",
        url=url,
        size_bytes=size or 0,
    ))
    if attachment_id is None:
        fail(f"Nothing to attach to: {target}")
    click.echo(f"📎 Attached {path.name} ({attachment_id})")


@logs.command("detach")
@click.argument('attachment_id')
@target_options
@click.pass_obj
def detach(obj: CliContext, attachment_id: str, log_id: Optional[str], use_draft: bool):
    """Remove an attachment from a saved entry or the draft."""
    target = resolve_target(log_id, use_draft)
    if not obj.store.remove_attachment(target, attachment_id):
        fail(f"Attachment {attachment_id} not found on {target}")
    click.echo(f"🗑️  Removed attachment {attachment_id}")


# Draft

@cli.group()
def draft():
    """Work on the in-progress draft."""


@draft.command("show")
@click.pass_obj
def show_draft(obj: CliContext):
    """Show the draft."""
    entry = obj.store.draft
    if entry is None:
        click.echo("No draft.")
        return
    click.echo(f"Title: {entry.title}")
    click.echo(f"Last saved: {entry.updated_at:%Y-%m-%d %H:%M:%S}")
    click.echo(entry.content)
    echo_checklist(entry.checklist_items)
    for attachment in entry.attachments:
        click.echo(f"  - {attachment.name} ({format_size_kb(attachment.size_bytes)})  ({attachment.id})")


@draft.command("save")
@click.option('--title', help='Draft title')
@click.option('--content', help='Draft body')
@click.option('--item', 'items', multiple=True, help='Add a checklist item')
@click.option('--required', 'required_items', multiple=True, help='Add a required checklist item')
@click.pass_obj
def save_draft(obj: CliContext, title: Optional[str], content: Optional[str],
               items: Tuple[str, ...], required_items: Tuple[str, ...]):
    """Save fields into the draft."""
    store = obj.store
    values = {}
    if title is not None:
        values["title"] = title
    if content is not None:
        values["content"] = content
    store.save_draft(LogEntryPatch(**values))

    for text in items:
        store.add_checklist_item(DRAFT, ChecklistItemCreate(text=text))
    for text in required_items:
        store.add_checklist_item(DRAFT, ChecklistItemCreate(text=text, required=True))
    click.echo("💾 Draft saved")


@draft.command("apply")
@click.argument('template_id')
@click.pass_obj
def apply_draft_template(obj: CliContext, template_id: str):
    """Merge a log template's checklist into the draft."""
    if not apply_template(obj.store, DRAFT, template_id):
        fail(f"Log template not found: {template_id}")
    click.echo(f"✅ Applied template {template_id}")


@draft.command("submit")
@click.pass_obj
@handle_errors
def submit_draft(obj: CliContext):
    """Validate the draft and save it as a log entry."""
    log_id = LogEditor(obj.store).submit(DRAFT)
    click.echo(f"✅ Created log entry {log_id}")


@draft.command("clear")
@click.pass_obj
def clear_draft(obj: CliContext):
    """Discard the draft."""
    obj.store.clear_draft()
    click.echo("🗑️  Draft cleared")


# Log templates

@cli.group()
def templates():
    """Manage checklist templates."""


@templates.command("list")
@click.pass_obj
def list_templates(obj: CliContext):
    """List log templates."""
    entries = obj.store.templates
    if not entries:
        click.echo("No templates.")
        return
    for template in entries:
        click.echo(f"{template.id}  {template.name}  ({len(template.checklist_items)} items)")


@templates.command("show")
@click.argument('template_id')
@click.pass_obj
def show_template(obj: CliContext, template_id: str):
    """Show a log template."""
    template = obj.store.get_template(template_id)
    if template is None:
        fail(f"Log template not found: {template_id}")
    click.echo(template.name)
    if template.description:
        click.echo(template.description)
    echo_checklist(template.checklist_items)


@templates.command("add")
@click.argument('name')
@click.option('--description', default='', help='Template description')
@click.option('--item', 'items', multiple=True, help='Checklist item text')
@click.option('--required', 'required_items', multiple=True, help='Required checklist item text')
@click.pass_obj
def add_template(obj: CliContext, name: str, description: str,
                 items: Tuple[str, ...], required_items: Tuple[str, ...]):
    """Create a log template."""
    new_items = [ChecklistItem(id="", text=text) for text in items]
    new_items += [ChecklistItem(id="", text=text, required=True) for text in required_items]
    template_id = obj.store.create_template(LogTemplateCreate(
        name=name, description=description, checklist_items=merge_checklist_items([], new_items)
    ))
    click.echo(f"✅ Created template {template_id}")


@templates.command("edit")
@click.argument('template_id')
@click.option('--name', help='New name')
@click.option('--description', help='New description')
@click.option('--item', 'items', multiple=True, help='Add a checklist item')
@click.option('--required', 'required_items', multiple=True, help='Add a required checklist item')
@click.option('--drop', 'dropped', multiple=True, help='Remove the checklist item with this ID')
@click.pass_obj
def edit_template(obj: CliContext, template_id: str, name: Optional[str], description: Optional[str],
                  items: Tuple[str, ...], required_items: Tuple[str, ...], dropped: Tuple[str, ...]):
    """Edit a log template."""
    store = obj.store
    template = store.get_template(template_id)
    if template is None:
        fail(f"Log template not found: {template_id}")

    values = {}
    if name is not None:
        values["name"] = name
    if description is not None:
        values["description"] = description
    if items or required_items or dropped:
        kept = [item for item in template.checklist_items if item.id not in dropped]
        new_items = [ChecklistItem(id="", text=text) for text in items]
        new_items += [ChecklistItem(id="", text=text, required=True) for text in required_items]
        values["checklist_items"] = merge_checklist_items(kept, new_items)

    store.update_template(template_id, LogTemplatePatch(**values))
    click.echo(f"✅ Updated template {template_id}")


@templates.command("delete")
@click.argument('template_id')
@click.pass_obj
def delete_template(obj: CliContext, template_id: str):
    """Delete a log template."""
    if not obj.store.delete_template(template_id):
        fail(f"Log template not found: {template_id}")
    click.echo(f"🗑️  Deleted template {template_id}")


# Export templates

@cli.group("export-templates")
def export_templates():
    """Manage export templates."""


@export_templates.command("list")
@click.pass_obj
def list_export_templates(obj: CliContext):
    """List export templates."""
    entries = obj.store.export_templates
    if not entries:
        click.echo("No export templates.")
        return
    for template in entries:
        click.echo(
            f"{template.id}  {template.name}  {template.format.value}  "
            f"{', '.join(enabled_sections(template))}"
        )


@export_templates.command("show")
@click.argument('template_id')
@click.pass_obj
def show_export_template(obj: CliContext, template_id: str):
    """Show an export template."""
    template = obj.store.get_export_template(template_id)
    if template is None:
        fail(f"Export template not found: {template_id}")

    click.echo(template.name)
    click.echo(f"  Format: {template.format.value}")
    click.echo(f"  Created: {template.created_at:%Y-%m-%d %H:%M}")
    click.echo(f"  Sections: {', '.join(enabled_sections(template)) or '-'}")
    if template.include_header:
        click.echo(f"  Header: {template.header_text or ''}")
    if template.include_footer:
        click.echo(f"  Footer: {template.footer_text or ''}")


@export_templates.command("add")
@click.argument('name')
@click.option('--format', '-f', 'fmt', type=click.Choice([f.value for f in ExportFormat]),
              default=ExportFormat.PDF.value, help='Document format')
@click.option('--header', 'header_text', help='Header text (enables the header)')
@click.option('--footer', 'footer_text', help='Footer text (enables the footer)')
@click.option('--checklist', is_flag=True, help='Include checklist details')
@click.option('--attachments', is_flag=True, help='Include attachment details')
@click.pass_obj
def add_export_template(obj: CliContext, name: str, fmt: str, header_text: Optional[str],
                        footer_text: Optional[str], checklist: bool, attachments: bool):
    """Create an export template."""
    template_id = obj.store.create_export_template(ExportTemplateCreate(
        name=name,
        format=ExportFormat(fmt),
        include_header=header_text is not None,
        header_text=header_text,
        include_footer=footer_text is not None,
        footer_text=footer_text,
        include_checklist=checklist,
        include_attachments=attachments,
    ))
    click.echo(f"✅ Created export template {template_id}")


@export_templates.command("edit")
@click.argument('template_id')
@click.option('--name', help='New name')
@click.option('--format', '-f', 'fmt', type=click.Choice([f.value for f in ExportFormat]),
              help='Document format')
@click.option('--header', 'header_text', help='Header text (enables the header)')
@click.option('--no-header', is_flag=True, help='Disable the header')
@click.option('--footer', 'footer_text', help='Footer text (enables the footer)')
@click.option('--no-footer', is_flag=True, help='Disable the footer')
@click.option('--checklist/--no-checklist', default=None, help='Include checklist details')
@click.option('--attachments/--no-attachments', default=None, help='Include attachment details')
@click.pass_obj
def edit_export_template(obj: CliContext, template_id: str, name: Optional[str], fmt: Optional[str],
                         header_text: Optional[str], no_header: bool,
                         footer_text: Optional[str], no_footer: bool,
                         checklist: Optional[bool], attachments: Optional[bool]):
    """Edit an export template."""
    if header_text is not None and no_header:
        raise click.UsageError("--header and --no-header are mutually exclusive")
    if footer_text is not None and no_footer:
        raise click.UsageError("--footer and --no-footer are mutually exclusive")

    values = {}
    if name is not None:
        values["name"] = name
    if fmt is not None:
        values["format"] = ExportFormat(fmt)
    if header_text is not None:
        values.update(include_header=True, header_text=header_text)
    if no_header:
        values["include_header"] = False
    if footer_text is not None:
        values.update(include_footer=True, footer_text=footer_text)
    if no_footer:
        values["include_footer"] = False
    if checklist is not None:
        values["include_checklist"] = checklist
    if attachments is not None:
        values["include_attachments"] = attachments

    if not obj.store.update_export_template(template_id, ExportTemplatePatch(**values)):
        fail(f"Export template not found: {template_id}")
    click.echo(f"✅ Updated export template {template_id}")


@export_templates.command("delete")
@click.argument('template_id')
@click.pass_obj
def delete_export_template(obj: CliContext, template_id: str):
    """Delete an export template."""
    if not obj.store.delete_export_template(template_id):
        fail(f"Export template not found: {template_id}")
    click.echo(f"🗑️  Deleted export template {template_id}")


# Export

@cli.group()
def export():
    """Export log entries to documents."""


@export.command("run")
@click.argument('template_id')
@click.argument('file_name')
@click.option('--log', 'log_ids', multiple=True, help='Entry ID to export (repeatable)')
@click.option('--from', 'date_from', type=click.DateTime(formats=['%Y-%m-%d']), help='First day of the range')
@click.option('--to', 'date_to', type=click.DateTime(formats=['%Y-%m-%d']), help='Last day of the range')
@click.option('--output-dir', '-o', type=click.Path(file_okay=False, path_type=Path), help='Output directory')
@click.pass_obj
@handle_errors
def run_export(obj: CliContext, template_id: str, file_name: str, log_ids: Tuple[str, ...],
               date_from: Optional[datetime], date_to: Optional[datetime], output_dir: Optional[Path]):
    """Render entries with TEMPLATE_ID into FILE_NAME (extension added)."""
    click.echo("🚀 Starting export...")
    result = obj.export_service(output_dir).export(
        template_id, file_name, log_ids=list(log_ids), date_from=date_from, date_to=date_to
    )

    if not result.success:
        fail(f"Export failed: {result.error_message}")

    click.echo("✅ Export completed!")
    click.echo(f"  • File: {result.file_name}")
    click.echo(f"  • Entries: {result.log_count}")
    click.echo(f"  • Location: {result.location}")


# Export history

@cli.group()
def history():
    """Browse and repeat past exports."""


@history.command("list")
@click.pass_obj
def list_history(obj: CliContext):
    """List past exports, newest first."""
    rows = obj.store.export_history
    if not rows:
        click.echo("No exports yet.")
        return
    for row in rows:
        click.echo(
            f"{row.id}  {row.created_at:%Y-%m-%d %H:%M}  {row.format.value}  "
            f"{row.file_name}  ({len(row.log_ids)} entries)"
        )


@history.command("redownload")
@click.argument('history_id')
@click.option('--output-dir', '-o', type=click.Path(file_okay=False, path_type=Path), help='Output directory')
@click.pass_obj
def redownload(obj: CliContext, history_id: str, output_dir: Optional[Path]):
    """Render a past export again."""
    result = obj.export_service(output_dir).redownload(history_id)
    if not result.success:
        fail(f"Re-download failed: {result.error_message}")
    click.echo(f"✅ Saved {result.file_name} to {result.location}")


@history.command("delete")
@click.argument('history_id')
@click.pass_obj
def delete_history(obj: CliContext, history_id: str):
    """Delete an export history row."""
    if not obj.store.delete_export_history(history_id):
        fail(f"Export history not found: {history_id}")
    click.echo(f"🗑️  Deleted export history {history_id}")


# HTTP API

@cli.command()
@click.option('--host', help='Bind address')
@click.option('--port', type=int, help='Bind port')
@click.pass_obj
def serve(obj: CliContext, host: Optional[str], port: Optional[int]):
    """Serve the PDF generation endpoint."""
    import uvicorn

    from .api import create_app

    settings = obj.settings
    host = host or settings.api.host
    port = port or settings.api.port
    click.echo(f"🌐 Serving on http://{host}:{port}")
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.logging.level.lower())


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\n👋 Goodbye!")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Application error: {e}")
        click.echo(f"❌ Application error: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
