"""
Track a list of POS Indonesia tracking numbers from the command line.

Reads tracking numbers (comma or newline separated) from a file, looks
them up one at a time through BinderByte and writes the spreadsheet.

Usage:
    python scripts/track_batch.py numbers.txt [output.xlsx]
"""

import asyncio
import sys
from pathlib import Path

from postrack.config import get_settings
from postrack.errors import PreconditionError
from postrack.exporting import build_workbook, export_filename
from postrack.models.tracking import RecordState
from postrack.tracker.batch import BatchTracker
from postrack.utils.logging import setup_logging

STATE_ICONS = {
    RecordState.FOUND: "✅",
    RecordState.NOT_FOUND: "⚠️ ",
    RecordState.ERROR: "❌",
    RecordState.PENDING: "⏸️ ",
}


async def run(
    input_path: Path, output_path: Path, tracker: BatchTracker | None = None
) -> int:
    """
    Track every number in input_path and export to output_path.

    Returns:
        Process exit code
    """
    if tracker is None:
        tracker = BatchTracker.from_settings(get_settings())

    try:
        records = await tracker.submit(input_path.read_text(encoding="utf-8"))
    except PreconditionError as e:
        print(f"❌ {e}")
        return 1

    print(f"🔎 Tracking {len(records)} number(s)...")
    await tracker.wait()

    snapshot = tracker.snapshot()
    for record in snapshot.records:
        icon = STATE_ICONS.get(record.state, "  ")
        if record.state == RecordState.FOUND:
            latest = record.latest_history
            detail = latest.desc if latest else record.data.data.summary.status
        elif record.state == RecordState.NOT_FOUND:
            detail = record.data.message or "Tracking data not found"
        else:
            detail = record.error or ""
        print(f"  {icon} {record.tracking_number}: {detail}")

    build_workbook(snapshot.records).save(output_path)

    summary = snapshot.summary
    print("\n" + "=" * 50)
    print(f"✅ Successful: {summary.successful}")
    print(f"❌ Failed: {summary.failed}")
    print(f"📄 Spreadsheet written to {output_path}")
    return 0


def main():
    """Main function."""
    setup_logging("postrack-cli")

    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    input_path = Path(sys.argv[1])
    if not input_path.exists():
        print(f"❌ Input file not found: {input_path}")
        sys.exit(1)

    output_path = Path(sys.argv[2]) if len(sys.argv) > 2 else Path(export_filename())

    sys.exit(asyncio.run(run(input_path, output_path)))


if __name__ == "__main__":
    main()
