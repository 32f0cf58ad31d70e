"""Rebuild metadata.json from the drawing files in DRAWINGS_DIR.

- Renames non-UUID drawing files to UUID-v4 names (old name becomes the title)
- Creates metadata entries for drawing files that have none
- Preserves existing metadata (never overwrites titles or timestamps)
- Removes index entries whose drawing file no longer exists
- Rewrites an index with corrupt, unparsable or duplicate entries
- Dry run by default; pass --execute to apply (backs up metadata.json first)

Do not run this while the server is handling writes.
"""

import argparse
import sys

from pydantic import ValidationError

from sketchvault.app.config import Settings, get_settings
from sketchvault.app.drawings.errors import DrawingNotFoundError
from sketchvault.app.drawings.reconcile import (
    apply_reconciliation,
    format_plan,
    plan_reconciliation,
)
from sketchvault.app.utils.logging import configure_logging


def _load_settings(drawings_dir: str | None) -> Settings:
    if drawings_dir:
        return Settings(drawings_dir=drawings_dir)
    return get_settings()


def main(argv: list[str] | None = None) -> int:
    """Plan (and optionally apply) a metadata rebuild."""
    parser = argparse.ArgumentParser(description="Rebuild metadata.json from drawing files")
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Apply changes (default is a dry run)",
    )
    parser.add_argument(
        "--drawings-dir",
        default=None,
        help="Override DRAWINGS_DIR",
    )
    args = parser.parse_args(argv)

    try:
        settings = _load_settings(args.drawings_dir)
    except ValidationError as e:
        print(f"Error: invalid configuration - set DRAWINGS_DIR in your .env file\n{e}")
        return 1

    configure_logging(settings.log_level)
    dry_run = not args.execute

    print("Rebuilding metadata database...\n")
    print(f"Drawings directory: {settings.drawings_dir}")
    print(f"Database path: {settings.metadata_path}")
    print(f"Mode: {'DRY RUN (use --execute to apply changes)' if dry_run else 'EXECUTE'}\n")

    try:
        plan = plan_reconciliation(
            settings.drawings_dir,
            extension=settings.drawing_extension,
            metadata_filename=settings.metadata_filename,
        )
    except DrawingNotFoundError as e:
        print(f"Error: {e}")
        return 1

    print(f"Found {settings.drawing_extension} files: {len(plan.files)}\n")
    for line in format_plan(plan):
        print(line)
    print()

    if plan.in_sync:
        print("Database is already in sync. No changes needed.")
        return 0

    if dry_run:
        print("This is a dry run. Use --execute to apply these changes.")
        return 0

    result = apply_reconciliation(plan)

    if result.backup_path is not None:
        print(f"Backed up existing database to: {result.backup_path}")
    print("Database updated successfully!\n")
    print(f"Total entries: {result.total}")
    print(f"  - Renamed: {result.renamed}")
    if result.rename_failures:
        print(f"  - Rename failures: {result.rename_failures}")
    print(f"  - Added: {result.added}")
    print(f"  - Kept: {result.retained}")
    print(f"  - Removed: {result.removed}")
    if result.repaired:
        print("  - Damaged index repaired")
    return 0


if __name__ == "__main__":
    sys.exit(main())
