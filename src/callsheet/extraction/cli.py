from __future__ import annotations

import argparse
import json
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from callsheet.extraction.config import CONFIG_PRESETS, ExtractionConfig, get_config
from callsheet.extraction.decoders import default_registry
from callsheet.extraction.pipeline import extract_bytes
from callsheet.extraction.schemas import ExtractionOptions, ExtractionResponse
from callsheet.shared.logger import PipelineLogger

_SUFFIX_TYPES = {
    ".txt": "text/plain",
    ".csv": "text/csv",
    ".tsv": "text/tab-separated-values",
    ".md": "text/markdown",
}


def _mime_type(path: Path, override: str | None) -> str:
    return override or _SUFFIX_TYPES.get(path.suffix.lower(), "text/plain")


def _collect_files(input_dir: Path, patterns: list[str]) -> list[Path]:
    files: list[Path] = []
    for pattern in patterns:
        files.extend(input_dir.glob(pattern))
    return sorted(set(f for f in files if f.is_file()))


def _dump(response: ExtractionResponse) -> str:
    return json.dumps(response.model_dump(), indent=2, ensure_ascii=False)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="callsheet-extract",
        description="Extract contacts from call-sheet text files.",
    )
    parser.add_argument("input", nargs="?", type=Path, default=None,
                        help="File or directory to process (stdin when omitted)")
    parser.add_argument("--output", type=Path, default=None,
                        help="Output file, or output directory in batch mode")
    parser.add_argument("--preset", choices=sorted(CONFIG_PRESETS), default=None)
    parser.add_argument("--method", choices=["heuristic", "model", "hybrid", "auto"], default=None)
    parser.add_argument("--threshold", type=float, default=None,
                        help="Minimum contact confidence (0-1)")
    parser.add_argument("--multi-pass", action="store_true")
    parser.add_argument("--role", action="append", default=[], dest="roles",
                        help="Preferred role; repeat to add more")
    parser.add_argument("--mime-type", default=None,
                        help="Decode inputs as this MIME type instead of guessing from the suffix")
    parser.add_argument("--pattern", type=str, default="**/*.txt,**/*.csv,**/*.md",
                        help="Comma-separated glob patterns for batch mode")
    parser.add_argument("--workers", type=int, default=1,
                        help="Parallel documents in batch mode; pipelines share no state")
    parser.add_argument("--log-file", type=Path, default=None,
                        help="INFO+ log file (readable summary)")
    parser.add_argument("--trace-file", type=Path, default=None,
                        help="TRACE+ log file (full detail)")
    parser.add_argument("--quiet", action="store_true", help="No console logging")
    return parser


def _options(args: argparse.Namespace) -> ExtractionOptions:
    return ExtractionOptions(
        role_preferences=args.roles,
        confidence_threshold=args.threshold,
        preferred_method=args.method,
        use_multi_pass=True if args.multi_pass else None,
    )


def _log_response(log: PipelineLogger, label: str, response: ExtractionResponse) -> None:
    if not response.success:
        log.error(f"{label}: {response.error}")
        return
    meta = response.metadata
    log.info(
        f"{label}: {len(response.contacts)} contacts | method={meta.get('method')} "
        f"| duplicates_removed={meta.get('duplicates_removed')} "
        f"| avg_confidence={meta.get('average_confidence')}"
    )
    for warning in meta.get("warnings", []):
        log.warn(f"{label}: {warning}")
    for contact in response.contacts:
        log.trace(
            f"  {contact.name!r:30} role={contact.role!r} email={contact.email!r} "
            f"phone={contact.phone!r} conf={contact.confidence:.2f} via {contact.extraction_method}"
        )


def _run_single(args: argparse.Namespace, config: ExtractionConfig, log: PipelineLogger) -> int:
    if args.input is None:
        data = sys.stdin.buffer.read()
        label = "<stdin>"
        mime_type = args.mime_type or "text/plain"
    else:
        data = args.input.read_bytes()
        label = str(args.input)
        mime_type = _mime_type(args.input, args.mime_type)

    with log.timer("extraction"):
        response = extract_bytes(data, mime_type, _options(args), registry=default_registry(), config=config)
    _log_response(log, label, response)

    output = _dump(response)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output + "\n", encoding="utf-8")
        log.info(f"Wrote {args.output}")
    else:
        print(output)
    return 0 if response.success else 1


def _run_batch(args: argparse.Namespace, config: ExtractionConfig, log: PipelineLogger) -> int:
    patterns = [p.strip() for p in args.pattern.split(",") if p.strip()]
    files = _collect_files(args.input, patterns)
    if not files:
        log.warn(f"No files matching {patterns} found in {args.input}")
        return 0

    output_dir: Path = args.output or args.input
    output_dir.mkdir(parents=True, exist_ok=True)
    options = _options(args)
    registry = default_registry()
    log.metric("files_found", len(files))

    lock = threading.Lock()
    errors: list[str] = []
    totals = {"contacts": 0, "failed": 0}
    done = 0

    def process_one(path: Path) -> None:
        nonlocal done
        rel_path = path.relative_to(args.input)
        started = time.perf_counter()
        response = extract_bytes(
            path.read_bytes(), _mime_type(path, args.mime_type), options,
            registry=registry, config=config,
        )
        elapsed = time.perf_counter() - started

        target = output_dir / rel_path.with_suffix(".json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(_dump(response) + "\n", encoding="utf-8")

        with lock:
            done += 1
            log.progress(done, len(files), f"{rel_path} ({elapsed:.2f}s)")
            _log_response(log, str(rel_path), response)
            if response.success:
                totals["contacts"] += len(response.contacts)
            else:
                totals["failed"] += 1

    log.section(f"Processing {len(files)} files")
    with log.timer("batch"):
        with ThreadPoolExecutor(max_workers=max(1, args.workers)) as executor:
            futures = {executor.submit(process_one, path): path for path in files}
            for future in as_completed(futures):
                exc = future.exception()
                if exc is not None:
                    with lock:
                        log.error(f"Exception processing {futures[future]}: {exc}")
                        errors.append(str(futures[future]))

    log.section("Extraction summary")
    log.metric("files_processed", len(files) - len(errors))
    log.metric("files_failed", totals["failed"] + len(errors))
    log.metric("total_contacts", totals["contacts"])
    return 1 if errors or totals["failed"] else 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.input is not None and not args.input.exists():
        print(f"Error: input does not exist: {args.input}", file=sys.stderr)
        return 1
    if args.threshold is not None and not 0.0 <= args.threshold <= 1.0:
        print("Error: --threshold must be between 0 and 1", file=sys.stderr)
        return 1

    try:
        config = ExtractionConfig.from_env(get_config(args.preset) if args.preset else None)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    log = PipelineLogger(
        log_file=args.log_file,
        trace_file=args.trace_file,
        console=not args.quiet,
        min_level="INFO",
    )
    log.install_stdlib_bridge(root_logger="callsheet", level=10 if args.trace_file else 20)
    try:
        log.info(f"Preset: {config.name} | method: {args.method or config.router.preferred_method}")
        if args.input is not None and args.input.is_dir():
            code = _run_batch(args, config, log)
        else:
            code = _run_single(args, config, log)
        log.summary()
        return code
    finally:
        log.remove_stdlib_bridge(root_logger="callsheet")
        log.close()


if __name__ == "__main__":
    sys.exit(main())
