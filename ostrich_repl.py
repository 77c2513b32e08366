import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from ostrich.ostrich_printer import Printer
from ostrich.ostrich_runtime import ChainRunner
from ostrich.ostrich_serialize import render_template, serialize


def debug_enabled() -> bool:
    """True when the OSTRICH_DEBUG environment variable asks for engine tracing."""
    return os.environ.get("OSTRICH_DEBUG", "").lower() not in ("", "0", "false", "no")


# A basic awaitable input prompt.
async def ainput(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return await loop.run_in_executor(None, sys.stdin.readline)


def parse_args(argv):
    parser = argparse.ArgumentParser(prog="ostrich", description="Build function chains from the command line.")
    parser.add_argument("file", nargs="?", help="file of chains, one per line")
    parser.add_argument("--format", choices=("plain", "json", "yaml"), default="plain",
                        help="how to print results")
    parser.add_argument("--template", help="mustache template rendered with values, first and count")
    parser.add_argument("--debug", action="store_true", help="log every push and call to stderr")
    return parser.parse_args(argv)


def format_values(values, opts) -> str:
    if opts.template:
        return render_template(opts.template, values)
    if opts.format != "plain":
        return serialize(values, fmt=opts.format).rstrip("\n")
    printer = Printer()
    return " ".join(printer.pformat(v) for v in values)


def run_script_file(file_path: str, opts):
    """Run a chain file non-interactively and exit with appropriate status."""
    runner = ChainRunner()
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    for result in runner.handle_script(source):
        if not result.ok:
            print(result.format_error(), file=sys.stderr)
            raise SystemExit(1)
        if result.values:
            print(format_values(result.values, opts))


async def main(argv=None):
    """Run a chain file when provided, otherwise start the interactive REPL."""
    opts = parse_args(sys.argv[1:] if argv is None else argv)
    if opts.debug or debug_enabled():
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(levelname)s %(name)s: %(message)s")
    if opts.file:
        run_script_file(opts.file, opts)
        return

    print("ostrich REPL v0.1")
    print("Type 'exit' or press Ctrl+D to quit.")

    runner = ChainRunner()

    # REPL Loop
    while True:
        try:
            raw = await ainput(">> ")
            if raw == "":
                raise EOFError
            line = raw.strip()

            if not line:
                continue
            if line == "exit":
                break

            result = runner.handle_line(line)

            if not result.ok:
                print(result.format_error(), file=sys.stderr)
                continue

            if result.values:
                print(format_values(result.values, opts))

        except EOFError:
            print("\nExiting.")
            break
        except Exception as e:
            # Print output errors and keep reading
            print(f"Error: {e}", file=sys.stderr)

def cli():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nExiting.")

if __name__ == "__main__":
    cli()
