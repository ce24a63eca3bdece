#!/usr/bin/env python3
"""Named-parameter Go → plain Go compiler.

Rewrites `f(a: 1, b: 2)` calls and `func f(a, b: int)` definitions into
positional Go. The output is written next to the input with a `.go` suffix.

Usage:
    python tools/named2go.py FILE.ngo                  # single file → FILE.ngo.go
    python tools/named2go.py FILE.ngo -o out.go        # single file → out.go
    python tools/named2go.py FILE.ngo --stdout         # single file → stdout
    python tools/named2go.py --dir src/                # every *.ngo under src/

Typically invoked from a directive at the top of the source file:
    //go:generate python tools/named2go.py $GOFILE
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

from named_params import Compiler, DIRECTIVE_PREFIXES, NamedParamsError


# ---------------------------------------------------------------------------
# File conversion
# ---------------------------------------------------------------------------

def convert_directory(compiler: Compiler, input_dir: str, pattern: str = '*.ngo',
                      recursive: bool = True) -> int:
    """Convert every file matching *pattern*; returns the number of failures."""
    input_path = Path(input_dir)
    count = 0
    errors = []

    files = input_path.rglob(pattern) if recursive else input_path.glob(pattern)
    for src_file in sorted(files):
        rel = src_file.relative_to(input_path)
        try:
            written = compiler.convert(src_file)
            count += 1
            print(f"  {rel} → {Path(written).relative_to(input_path)}", file=sys.stderr)
        except (OSError, NamedParamsError) as e:
            errors.append((str(rel), str(e)))
            print(f"  ERROR {rel}: {e}", file=sys.stderr)

    print(f"\nConverted {count} files, {len(errors)} errors.", file=sys.stderr)
    if errors:
        print("Errors:", file=sys.stderr)
        for path, err in errors:
            print(f"  {path}: {err}", file=sys.stderr)
    return len(errors)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Compile Go with named parameters into plain positional Go"
    )
    parser.add_argument('input', nargs='?', help='Input file path')
    parser.add_argument('-o', '--output', help='Output file (default: INPUT.go)')
    parser.add_argument('--stdout', action='store_true',
                        help='Print the result instead of writing a file')
    parser.add_argument('--dir', help='Convert entire directory')
    parser.add_argument('--pattern', default='*.ngo',
                        help='File pattern for --dir (default: *.ngo)')
    parser.add_argument('--no-recursive', action='store_true',
                        help='Do not recurse into subdirectories')
    parser.add_argument('--directive', action='append', metavar='PREFIX',
                        help='Line prefix to blank out (repeatable; default: %s)'
                             % ', '.join(repr(p) for p in DIRECTIVE_PREFIXES))
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log rewrite details to stderr')

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    compiler = Compiler(directive_prefixes=args.directive or DIRECTIVE_PREFIXES)

    if args.dir:
        if args.output:
            print("Error: -o/--output cannot be used with --dir", file=sys.stderr)
            return 1
        failures = convert_directory(compiler, args.dir, args.pattern,
                                     recursive=not args.no_recursive)
        return 1 if failures else 0

    if not args.input:
        parser.print_help()
        return 1

    try:
        if args.stdout:
            sys.stdout.write(compiler.compile_file(args.input))
        else:
            written = compiler.convert(args.input, args.output)
            print(f"Written to {written}", file=sys.stderr)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except NamedParamsError as e:
        print(f"Error: {args.input}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
