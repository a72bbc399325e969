from __future__ import annotations

import os
import sys
import argparse
from typing import List

from sourcebutler.config import DEFAULT_OUTPUT_FILENAME, EXCLUDED_FOLDER_NAMES_DEFAULT
from sourcebutler.core.output_generator import write_output
from sourcebutler.core.path_filter import PathFilter, normalize_extension
from sourcebutler.core.session import SourceSession
from sourcebutler.utils.logger import DiagnosticLog, attach_diagnostics, detach_diagnostics


class _Progress:
    def __init__(self, label: str):
        self.label = label
        self.last = -1

    def __call__(self, pct: float) -> None:
        step = int(pct) // 10 * 10
        if step != self.last:
            self.last = step
            print(f"{self.label} {step}%", file=sys.stderr)


def main(argv: List[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Render a folder tree and concatenate the selected source files")
    p.add_argument("root", help="Root folder to scan")
    p.add_argument("--out", "-o", help="Output file path (default: <root>/source_output.txt)")
    p.add_argument("--ext", action="append", default=[], help="Extension to include, e.g. .py (repeatable; default: saved or all)")
    p.add_argument("--exclude-folder-name", action="append", default=[], help="Extra folder name to skip everywhere (repeatable)")
    p.add_argument("--gitignore", action="store_true", help="Also honor the root .gitignore")
    p.add_argument("--no-save-config", action="store_true", help="Do not write .sourcebutler-config")
    p.add_argument("--tree-only", action="store_true", help="Only output the rendered tree")
    p.add_argument("--verbose", "-v", action="store_true", help="Print diagnostics to stderr")

    args = p.parse_args(argv)
    root = os.path.abspath(args.root)
    if not os.path.isdir(root):
        print(f"Root folder does not exist: {root}", file=sys.stderr)
        return 2

    # The destination may sit inside the root; it must never feed the next run
    out_path = args.out or os.path.join(os.path.realpath(root), DEFAULT_OUTPUT_FILENAME)
    out_path = os.path.abspath(out_path)
    path_filter = PathFilter(
        set(EXCLUDED_FOLDER_NAMES_DEFAULT) | set(args.exclude_folder_name or []),
        respect_gitignore=args.gitignore,
        excluded_files=[out_path],
    )
    session = SourceSession(root, path_filter=path_filter)

    diagnostics = attach_diagnostics(DiagnosticLog())
    try:
        session.load(progress=_Progress("Scanning"))

        if args.ext:
            wanted = {e for e in map(normalize_extension, args.ext) if e}
            for ext in sorted(wanted - set(session.index)):
                print(f"No scanned folder contains {ext} files; ignoring it.", file=sys.stderr)
            for ext in set(session.selected_extensions) ^ (wanted & set(session.index)):
                session.toggle_extension(ext)

        if not session.can_export():
            print("No extensions selected; nothing to export.", file=sys.stderr)
            return 1

        if args.tree_only:
            snap = session.snapshot()
            text = session.generator.render_tree(snap.root, snap.selected_paths, snap.selected_extensions)
            if not args.no_save_config:
                session.save_config(snap)
        else:
            result = session.export(progress=_Progress("Processing"), save_config=not args.no_save_config)
            text = result.text
            print(
                f"Processed {result.processed_count} files, skipped {result.skipped_count}.",
                file=sys.stderr,
            )
    finally:
        detach_diagnostics(diagnostics)
        if args.verbose:
            sys.stderr.write(diagnostics.text())

    if not write_output(text, out_path):
        print("Failed to write output.", file=sys.stderr)
        return 1

    print(out_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
