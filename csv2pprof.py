"""
Convert a CSV table of weighted stack traces into a pprof profile.

The header row names one 'stack' column (frames separated by ';') and any
number of weight columns labelled 'type/unit' (unit defaults to 'count').
Every following row becomes one pprof sample.

    stack,samples/count,time/ms
    main;foo;bar,1,1000
"""

import argparse
import json
import sys

from csv_header import HeaderError, format_row, parse_header
from csv_rows import read_records, translate_rows
from pprof_encode import write_profile
from pprof_model import ConversionError

GENERATOR = "csv2pprof"
DEFAULT_OUTPUT = "profile.pb.gz"
INPUT_ENCODING = "utf-8"
SUMMARY_ROWS = 5


def convert_csv_to_pprof(stream):
    """
    Read a CSV table from a text stream and return the populated Profile.
    Raises a ConversionError subclass on the first problem found.
    """
    records = read_records(stream)
    header = next(records, None)
    if header is None:
        raise HeaderError(f'expected "stack" in CSV header row, got: {format_row([])}')

    _, labels = header
    plan = parse_header(labels)
    return translate_rows(plan, records, comments=[f"Generated by {GENERATOR}"])


def build_parser():
    parser = argparse.ArgumentParser(
        prog=GENERATOR,
        description="Convert a CSV table of weighted stack traces into a pprof profile.")
    parser.add_argument("input", nargs="?", default="-",
                        help="CSV file to read, '-' or omitted for stdin")
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT,
                        help=f"where the gzipped pprof profile is written (default: {DEFAULT_OUTPUT})")
    parser.add_argument("--json", dest="json_path", metavar="PATH",
                        help="also write the profile model as JSON")
    parser.add_argument("--summary", action="store_true",
                        help="print the first samples as a table")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="don't print progress messages")
    return parser


def main(argv=None):
    """
    Command line entry point. Returns the process exit status.
    """
    args = build_parser().parse_args(argv)

    def log(msg):
        if not args.quiet:
            print(msg, file=sys.stderr)

    source = "stdin" if args.input == "-" else args.input
    log(f"Reading CSV from: {source}")

    try:
        if args.input == "-":
            if hasattr(sys.stdin, "reconfigure"):
                sys.stdin.reconfigure(encoding=INPUT_ENCODING, errors="replace", newline="")
            profile = convert_csv_to_pprof(sys.stdin)
        else:
            with open(args.input, encoding=INPUT_ENCODING, errors="replace", newline="") as f:
                profile = convert_csv_to_pprof(f)
    except (ConversionError, OSError) as e:
        print(f"{GENERATOR}: {e}", file=sys.stderr)
        return 1

    sample_types = ", ".join(vt.label for vt in profile.sample_types)
    log(f"Converted {len(profile.samples)} samples with {len(profile.functions)} distinct frames "
        f"({sample_types}).")

    if args.summary:
        print(f"\n--- Samples (first {SUMMARY_ROWS} rows): ---")
        print(profile.to_dataframe().head(SUMMARY_ROWS))

    try:
        if args.json_path:
            log(f"Writing profile model to {args.json_path}...")
            with open(args.json_path, "w") as f:
                json.dump(profile.to_dict(), f, indent=2)

        log(f"Writing pprof profile to {args.output}...")
        write_profile(profile, args.output)
    except OSError as e:
        print(f"{GENERATOR}: {e}", file=sys.stderr)
        return 1

    log("Done.")
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
