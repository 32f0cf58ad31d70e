"""Offline reconciliation of drawing files against the metadata index.

Content files are authoritative; the index is treated as derived. Planning
reads only. Applying backs up the index, renames non-canonical files to
UUID-v4 names, and rewrites the index in full. Not safe to run alongside a
live server.
"""

import json
import logging
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from sketchvault.app.db.metadata_index import write_index_document
from sketchvault.app.drawings.constants import IMPORTED_TITLE_PREFIX, MAX_TITLE_LENGTH
from sketchvault.app.drawings.errors import DrawingNotFoundError
from sketchvault.app.drawings.validation import (
    is_canonical_drawing_id,
    is_valid_drawing_id,
    new_drawing_id,
    normalize_title,
)
from sketchvault.app.models.drawings import MetadataRecord
from sketchvault.app.utils.metrics import PrometheusDrawingMetrics

logger = logging.getLogger(__name__)


def _epoch_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class SalvagedIndex:
    """Records recovered from an index document, and what had to be dropped."""

    records: dict[str, MetadataRecord] = field(default_factory=dict)
    skipped: int = 0
    duplicates: int = 0
    corrupt: bool = False

    @property
    def damaged(self) -> bool:
        """True when the document on disk would fail a strict read."""
        return self.corrupt or bool(self.skipped or self.duplicates)


@dataclass
class ScannedDrawing:
    """A drawing file found in the content root."""

    current_id: str
    drawing_id: str
    path: Path
    new_path: Path
    size: int

    @property
    def needs_rename(self) -> bool:
        """True when the file is not already named by its canonical ID."""
        return self.current_id != self.drawing_id


@dataclass
class ReconciliationPlan:
    """Changes needed to bring the index in line with the content root."""

    content_root: Path
    index_path: Path
    files: list[ScannedDrawing] = field(default_factory=list)
    renames: list[ScannedDrawing] = field(default_factory=list)
    additions: list[MetadataRecord] = field(default_factory=list)
    retained: list[MetadataRecord] = field(default_factory=list)
    removals: list[MetadataRecord] = field(default_factory=list)
    index: SalvagedIndex = field(default_factory=SalvagedIndex)

    @property
    def in_sync(self) -> bool:
        """True when applying the plan would change nothing on disk."""
        return not (self.renames or self.additions or self.removals or self.index.damaged)


@dataclass
class ReconciliationResult:
    """Outcome of applying a plan."""

    renamed: int = 0
    rename_failures: int = 0
    added: int = 0
    retained: int = 0
    removed: int = 0
    total: int = 0
    repaired: bool = False
    backup_path: Path | None = None
    written: bool = False


def read_index_tolerant(path: Path) -> SalvagedIndex:
    """Read whatever records can be salvaged from an index document.

    A missing file yields an empty index. An unreadable or corrupt file
    yields an empty index flagged as corrupt. Entries that fail validation
    are skipped; duplicate IDs keep the last entry. Both are counted so the
    document gets rewritten.
    """
    salvaged = SalvagedIndex()
    if not path.exists():
        return salvaged

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("Error reading metadata index %s: %s", path, e)
        salvaged.corrupt = True
        return salvaged

    if not isinstance(data, dict):
        logger.error("Metadata index %s is not a JSON object", path)
        salvaged.corrupt = True
        return salvaged

    entries = data.get("drawings", [])
    if not isinstance(entries, list):
        logger.error("Metadata index %s has no drawings list", path)
        salvaged.corrupt = True
        return salvaged

    for entry in entries:
        try:
            record = MetadataRecord.model_validate(entry)
        except ValidationError:
            logger.warning("Skipping unparsable metadata entry: %r", entry)
            salvaged.skipped += 1
            continue
        if record.id in salvaged.records:
            logger.warning("Duplicate metadata entry for %s; keeping the later one", record.id)
            salvaged.duplicates += 1
        salvaged.records[record.id] = record

    return salvaged


def scan_content_root(content_root: Path, extension: str) -> list[ScannedDrawing]:
    """List drawing files, assigning a fresh UUID-v4 to non-canonical names.

    Raises:
        DrawingNotFoundError: If the content root does not exist
    """
    if not content_root.is_dir():
        raise DrawingNotFoundError(f"Drawings directory does not exist: {content_root}")

    scanned: list[ScannedDrawing] = []
    for path in sorted(content_root.iterdir()):
        if not path.is_file() or not path.name.endswith(extension):
            continue

        current_id = path.name[: -len(extension)]
        drawing_id = current_id if is_canonical_drawing_id(current_id) else new_drawing_id()

        scanned.append(
            ScannedDrawing(
                current_id=current_id,
                drawing_id=drawing_id,
                path=path,
                new_path=content_root / f"{drawing_id}{extension}",
                size=path.stat().st_size,
            )
        )

    return scanned


def _title_from_stem(stem: str, drawing_id: str) -> str:
    """Title for a renamed file: its old stem, trimmed and capped."""
    return normalize_title(stem, drawing_id)[:MAX_TITLE_LENGTH].rstrip()


def plan_reconciliation(
    content_root: Path,
    *,
    extension: str = ".excalidraw",
    metadata_filename: str = "metadata.json",
    now: datetime | None = None,
    clock_ms: Callable[[], int] = _epoch_ms,
) -> ReconciliationPlan:
    """Compare drawing files to the index without modifying either.

    Args:
        content_root: Directory holding drawing files and the index
        extension: Drawing file extension
        metadata_filename: Index document filename
        now: Timestamp for fabricated records
        clock_ms: Epoch-millis source for 'imported-' titles

    Returns:
        The reconciliation plan
    """
    timestamp = now or datetime.now(timezone.utc)
    index_path = content_root / metadata_filename

    salvaged = read_index_tolerant(index_path)
    existing = salvaged.records
    files = scan_content_root(content_root, extension)
    plan = ReconciliationPlan(
        content_root=content_root, index_path=index_path, files=files, index=salvaged
    )

    claimed: set[str] = set()
    for scanned in files:
        if scanned.needs_rename:
            plan.renames.append(scanned)

        record = existing.get(scanned.drawing_id)
        if record is not None:
            claimed.add(scanned.drawing_id)
        elif scanned.needs_rename and scanned.current_id in existing:
            claimed.add(scanned.current_id)
            record = existing[scanned.current_id].model_copy(update={"id": scanned.drawing_id})

        if record is not None:
            plan.retained.append(record)
            continue

        if scanned.needs_rename:
            title = _title_from_stem(scanned.current_id, scanned.drawing_id)
        else:
            title = f"{IMPORTED_TITLE_PREFIX}{clock_ms()}"

        plan.additions.append(
            MetadataRecord(
                id=scanned.drawing_id,
                title=title,
                created_at=timestamp,
                updated_at=timestamp,
            )
        )

    plan.removals = [record for drawing_id, record in existing.items() if drawing_id not in claimed]
    return plan


def apply_reconciliation(
    plan: ReconciliationPlan,
    *,
    now: datetime | None = None,
) -> ReconciliationResult:
    """Back up the index, rename files and rewrite the index.

    Rename failures are logged and counted; the pass continues. A record whose
    file could not be renamed stays under its previous ID when that ID is
    valid, and is left out otherwise.

    Args:
        plan: Plan from plan_reconciliation
        now: Time used for the backup file suffix (epoch millis)
    """
    result = ReconciliationResult(
        retained=len(plan.retained),
        added=len(plan.additions),
        removed=len(plan.removals),
    )

    if plan.in_sync:
        result.total = len(plan.retained)
        return result

    if plan.index_path.exists():
        stamp = now or datetime.now(timezone.utc)
        backup_ms = int(stamp.timestamp() * 1000)
        backup_path = plan.index_path.with_name(f"{plan.index_path.name}.backup.{backup_ms}")
        shutil.copy2(plan.index_path, backup_path)
        result.backup_path = backup_path
        logger.info("Backed up metadata index to %s", backup_path)

    failed: dict[str, ScannedDrawing] = {}
    for scanned in plan.renames:
        try:
            if scanned.new_path.exists():
                raise FileExistsError(f"{scanned.new_path} already exists")
            scanned.path.rename(scanned.new_path)
            result.renamed += 1
            logger.info("Renamed %s -> %s", scanned.path.name, scanned.new_path.name)
        except OSError as e:
            result.rename_failures += 1
            failed[scanned.drawing_id] = scanned
            logger.error("Failed to rename %s: %s", scanned.path.name, e)

    records: list[MetadataRecord] = []
    for record in [*plan.retained, *plan.additions]:
        scanned = failed.get(record.id)
        if scanned is None:
            records.append(record)
        elif is_valid_drawing_id(scanned.current_id):
            records.append(record.model_copy(update={"id": scanned.current_id}))
        else:
            logger.warning("Leaving %s out of the index; it could not be renamed", scanned.path.name)

    records.sort(key=lambda r: r.updated_at, reverse=True)
    write_index_document(plan.index_path, records)
    result.total = len(records)
    result.repaired = plan.index.damaged
    result.written = True

    metrics = PrometheusDrawingMetrics()
    metrics.inc_reconciliation("renamed", result.renamed)
    metrics.inc_reconciliation("added", result.added)
    metrics.inc_reconciliation("removed", result.removed)
    metrics.inc_reconciliation("repaired", int(result.repaired))

    return result


def format_plan(plan: ReconciliationPlan) -> list[str]:
    """Render a plan as report lines for the command line."""
    lines = [
        "Changes to be made:",
        f"  Rename files: {len(plan.renames)}",
        f"  Add new entries: {len(plan.additions)}",
        f"  Keep existing entries: {len(plan.retained)}",
        f"  Remove orphaned entries: {len(plan.removals)}",
        f"  Repair damaged index: {'yes' if plan.index.damaged else 'no'}",
    ]

    if plan.index.damaged:
        lines.append("")
        lines.append("Index problems to repair:")
        if plan.index.corrupt:
            lines.append("  ! index could not be parsed; it will be rebuilt from drawing files")
        if plan.index.skipped:
            lines.append(f"  ! unparsable entries dropped: {plan.index.skipped}")
        if plan.index.duplicates:
            lines.append(f"  ! duplicate entries collapsed: {plan.index.duplicates}")

    if plan.renames:
        lines.append("")
        lines.append("Files to rename (to UUID format):")
        lines.extend(f"  {s.path.name} -> {s.new_path.name}" for s in plan.renames)

    if plan.additions:
        lines.append("")
        lines.append("New metadata entries to add:")
        lines.extend(
            f'  + {r.id}: "{r.title}" (created: {r.created_at.isoformat()})' for r in plan.additions
        )

    if plan.removals:
        lines.append("")
        lines.append("Orphaned entries to remove:")
        lines.extend(f'  - {r.id}: "{r.title}"' for r in plan.removals)

    return lines
