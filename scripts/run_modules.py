"""Load definition scripts from a directory and run them once.

Usage:
    python scripts/run_modules.py path/to/modules [--preload] [--json]

Executes every script under the directory (each calls ``define``), fires
the bulk run and prints one line per module. Exit code 1 if any module
ended in ERROR or could not be resolved, 2 if a definition script failed
to run (the remaining scripts are still loaded).
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lazymod.config import get_config  # noqa: E402
from lazymod.logging_setup import configure_logging  # noqa: E402
from lazymod.modules import (  # noqa: E402
    ModuleRuntime,
    ModuleState,
    ScriptFetcher,
)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("scripts_dir", nargs="?", default=None)
    ap.add_argument("--suffix", default=None)
    ap.add_argument(
        "--preload",
        action="store_true",
        help="fetch known-but-undefined requirements before the bulk run",
    )
    ap.add_argument("--json", action="store_true", help="JSON output")
    args = ap.parse_args(argv)

    cfg = get_config()
    configure_logging(cfg.logging)
    fetcher = ScriptFetcher(
        args.scripts_dir or cfg.modules.scripts_dir,
        args.suffix or cfg.modules.suffix,
    )
    runtime = ModuleRuntime(fetcher=fetcher)
    loaded = runtime.load_scripts()
    for e in loaded.failures:
        print(f"error: {e}", file=sys.stderr)
    if args.preload or cfg.modules.preload_missing:
        runtime.preload_missing()
    report = runtime.ready()

    rows = runtime.describe()
    if args.json:
        print(json.dumps({"modules": rows}, indent=2, default=str))
    else:
        width = max((len(r["name"]) for r in rows), default=4)
        for r in rows:
            line = f"{r['name']:<{width}}  {r['state']}"
            if r["error"]:
                line += f"  {r['error']}"
            print(line)
    if not loaded.ok:
        return 2
    failed = any(m.state is ModuleState.ERROR for m in runtime.registry)
    if failed or (report is not None and not report.ok):
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
