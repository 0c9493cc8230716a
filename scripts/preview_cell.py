#!/usr/bin/env python3
"""
Manual preview of one cell through the host bridge.

Runs the full pipeline (field check, fetch, normalization, Markdown
detection, rendering) against the bridge configured by HOST_API_URL and
prints the outcome and the produced HTML.

Usage:
    python scripts/preview_cell.py RECORD_ID FIELD_ID [--save]

Example:
    python scripts/preview_cell.py rec3fa9 fldNotes
    python scripts/preview_cell.py rec3fa9 fldNotes --save
"""
import asyncio
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cell_preview.cells import Selection
from cell_preview.host_http import HttpDocumentHost
from cell_preview.pipeline import PreviewController
from cell_preview.watcher import SelectionWatcher


async def preview_cell(record_id: str, field_id: str, save: bool = False) -> None:
    """Preview a single cell and print the result."""
    print(f"\n{'=' * 60}")
    print(f"🔍 Preview: record={record_id} field={field_id}")
    print(f"{'=' * 60}\n")

    host = HttpDocumentHost()
    controller = PreviewController()
    watcher = SelectionWatcher(host, controller)

    try:
        if not await watcher.start():
            print(f"❌ {controller.notice}")
            return
        if controller.notice:
            print(f"⚠️  {controller.notice}")

        result = await watcher.handle_selection(Selection(record_id=record_id, field_id=field_id))
        if result is None:
            print("❌ Field not found, nothing to preview")
            return

        print(f"📊 Outcome: {result.outcome}")
        html = controller.state.rendered_html

        if save:
            filepath = Path("previews") / f"{record_id}_{field_id}.html"
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_text(html, encoding="utf-8")
            print(f"\n💾 Saved: {filepath}")
        else:
            print(f"\n{'─' * 60}")
            print("📄 HTML:")
            print(f"{'─' * 60}\n")
            print(html)

    except Exception as e:
        print(f"❌ Error: {e}")
        import traceback
        traceback.print_exc()
    finally:
        await watcher.stop()
        await host.aclose()


def main():
    args = sys.argv[1:]
    save = "--save" in args
    args = [a for a in args if a != "--save"]
    if len(args) != 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(preview_cell(args[0], args[1], save=save))


if __name__ == "__main__":
    main()
