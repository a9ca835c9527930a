import sys
from pathlib import Path

from rinha.rinha_runtime import ProgramRunner
from rinha.rinha_printer import StdoutSink, display

RECURSION_LIMIT = 20000


def _format_from_suffix(path: Path):
    suffix = path.suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    return None


def run_program_file(file_path: str, source_path: str | None = None) -> int:
    """Run a rinha syntax-tree file and return the process exit status."""
    p = Path(file_path)
    try:
        data = p.read_bytes()
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        return 1

    source = None
    if source_path:
        try:
            source = Path(source_path).read_text(encoding="utf-8")
        except FileNotFoundError:
            print(f"Error: source file not found: {source_path}", file=sys.stderr)
            return 1

    runner = ProgramRunner(printer=StdoutSink(), recursion_limit=RECURSION_LIMIT)
    result = runner.handle_program(data, fmt=_format_from_suffix(p), filename=p.name)
    if result.status == 'error':
        print(result.format_error(source), file=sys.stderr)
        return 1
    print(display(result.value))
    return 0


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if not argv or argv[0].startswith("-"):
        print("usage: run_rinha.py <program.json|program.yaml> [source.rinha]", file=sys.stderr)
        return 2
    return run_program_file(argv[0], argv[1] if len(argv) > 1 else None)


if __name__ == "__main__":
    raise SystemExit(main())
