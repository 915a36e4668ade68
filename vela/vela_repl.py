import argparse
import sys
from pathlib import Path

import yaml

from vela.vela_runtime import ScriptRunner, ExecutionResult, load_bindings

BANNER = "Vela REPL v0.1"


# A basic input prompt; returns "" at end of input like readline().
def read_line(prompt: str) -> str:
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return sys.stdin.readline()


def _echo_stages(result: ExecutionResult, args):
    if args.tokens and result.tokens:
        print(" ".join(repr(t) for t in result.tokens))
    if args.ast and result.ast is not None:
        print(result.ast)


def run_script_file(file_path: str, runner: ScriptRunner, args) -> int:
    """Run a Vela script file non-interactively and return the exit status."""
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        return 1
    result = runner.handle_script(source)
    _echo_stages(result, args)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        return 1
    print(result.printable)
    return 0


def repl(runner: ScriptRunner, args) -> int:
    print(BANNER)
    print("Type 'exit' or press Ctrl+D to quit.")
    while True:
        try:
            raw = read_line(">> ")
        except EOFError:
            raw = ""
        except KeyboardInterrupt:
            print()
            continue
        if raw == "":
            print("\nExiting.")
            break
        line = raw.strip()
        if not line:
            continue
        if line == "exit":
            break

        result = runner.handle_script(line)
        _echo_stages(result, args)
        if result.status == 'error':
            print(result.format_error(), file=sys.stderr)
            continue
        print(result.printable)
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vela", description="Run a Vela script, or start the REPL.")
    parser.add_argument("file", nargs="?", help="script file to run; omit for the REPL")
    parser.add_argument("--tokens", action="store_true", help="print the token stream before evaluating")
    parser.add_argument("--ast", action="store_true", help="print the parsed AST before evaluating")
    parser.add_argument("--bindings", metavar="YAML", help="YAML mapping of extra root-scope bindings")
    return parser


def main(argv=None) -> int:
    """Run a script file when provided, otherwise start the interactive REPL."""
    args = build_arg_parser().parse_args(argv)
    bindings = {}
    if args.bindings:
        try:
            bindings = load_bindings(args.bindings)
        except (OSError, ValueError, yaml.YAMLError) as e:
            print(f"Error: cannot load bindings: {e}", file=sys.stderr)
            return 1
    try:
        runner = ScriptRunner(bindings=bindings)
        runner._initialize()
    except TypeError as e:
        # to_value rejects YAML values Vela has no type for (e.g. mappings).
        print(f"Error: cannot load bindings: {e}", file=sys.stderr)
        return 1
    if args.file:
        return run_script_file(args.file, runner, args)
    return repl(runner, args)


if __name__ == "__main__":
    sys.exit(main())
