import sys
from pathlib import Path

from ljson import try_parse, reify, with_std_lib, LJSONError, Printer
from ljson.ljson_serialize import deserialize

# A basic input prompt.
def prompt_input(prompt: str) -> str:
    return input(prompt)

def format_value(value, pretty: bool = False) -> str:
    """Render a result as LJSON text (functions included)."""
    term = reify(value)
    printer = Printer()
    return printer.pformat(term) if pretty else printer.format(term)

def run_script_file(file_path: str, args: list, stdlib: bool = False, pretty: bool = False):
    """Parse an LJSON file, apply it to `args` if it is a function, and print the result."""
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    result = try_parse(source)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        raise SystemExit(1)
    value = result.value
    if callable(value):
        fn = with_std_lib(value) if stdlib else value
        # Each argument is a JSON or YAML document
        call_args = [deserialize(a) for a in args]
        try:
            value = fn(*call_args)
        except (LJSONError, TypeError) as e:
            print(f"Error: {e}", file=sys.stderr)
            raise SystemExit(1)
    elif args:
        print("Error: arguments given but the file does not contain a function", file=sys.stderr)
        raise SystemExit(1)
    print(format_value(value, pretty))

def main(argv=None):
    """Run a file when provided, otherwise start the interactive REPL."""
    argv = sys.argv[1:] if argv is None else list(argv)
    flags = {a for a in argv if a.startswith("--")}
    positional = [a for a in argv if not a.startswith("--")]
    stdlib = "--stdlib" in flags
    pretty = "--pretty" in flags

    if positional:
        run_script_file(positional[0], positional[1:], stdlib=stdlib, pretty=pretty)
        return

    print("LJSON REPL v0.1")
    print("Type 'exit' or press Ctrl+D to quit.")

    while True:
        try:
            line = prompt_input(">> ").strip()
        except EOFError:
            print("\nExiting.")
            break

        if not line:
            continue
        if line == "exit":
            break
        if line == ":pretty":
            pretty = not pretty
            print(f"pretty printing {'on' if pretty else 'off'}")
            continue

        result = try_parse(line)
        if result.status == 'error':
            print(result.format_error(), file=sys.stderr)
            continue
        printer = Printer()
        print(printer.pformat(result.term) if pretty else result.text)

def cli():
    try:
        main()
    except KeyboardInterrupt:
        print("\nExiting.")

if __name__ == "__main__":
    cli()
