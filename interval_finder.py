#!/usr/bin/env python3
"""
Interval Finder

Scans all 479,001,600 orderings of the twelve pitch classes for the ones whose
six note pairs use minor 3rd, major 3rd, perfect 4th, perfect 5th, minor 6th
and major 6th exactly once each, then writes them to a CSV file.

Usage:
    python interval_finder.py solutions.csv
    python interval_finder.py solutions --musicxml first_fifty --musicxml-limit 50
    python interval_finder.py part1.csv --stop 100000000
    python interval_finder.py part2.csv --start 100000000      # resume
    python interval_finder.py solutions.csv --cross-check

Ctrl-C stops the scan early; solutions found so far are still written and the
index to resume from is printed.
"""

import argparse
import signal
import sys
import threading
import time

from interval_search import DEFAULT_PROGRESS_EVERY, MAX_COMBOS, scan
from solution_export import resolve_output_path, write_csv, write_musicxml

EXIT_CANCELLED = 130


class ProgressPrinter:
    """Single-line progress display for the scan and the CSV writer."""

    def __init__(self, start: int = 0, quiet: bool = False, save_every: int = 1000):
        self.start = start
        self.quiet = quiet
        self.save_every = save_every
        self._started = time.perf_counter()

    def rate(self, index: int) -> float:
        """Orderings per second scanned since `start`."""
        elapsed = time.perf_counter() - self._started
        return (index - self.start) / elapsed if elapsed > 0 else 0.0

    def __call__(self, index: int, total: int, found: int) -> None:
        if self.quiet:
            return
        print(f"\rFinding solutions: {index:,}/{total:,} "
              f"({found:,} solutions, {self.rate(index):,.0f}/s)",
              end="", flush=True)

    def saving(self, written: int, total: int) -> None:
        if self.quiet:
            return
        if written % self.save_every == 0 or written == total:
            print(f"\rSaving: {written:,}/{total:,}", end="", flush=True)


def _install_cancel_handler(cancel: threading.Event):
    def handler(signum, frame):
        cancel.set()
    return signal.signal(signal.SIGINT, handler)


def run_cross_check(solutions) -> bool:
    # Imported lazily: OR-Tools is only needed for this check.
    from interval_model import PairIntervalModel, cross_check

    print("Cross-checking against CP-SAT model...")
    model = PairIntervalModel()
    modelled = model.solve_all()
    if model.failure_stats is not None:
        print(f"ERROR: CP-SAT search did not finish: {model.failure_stats}")
        return False
    check = cross_check(solutions, modelled)
    print(f"  Scan:  {check.scan_count:,} solutions")
    print(f"  Model: {check.model_count:,} solutions")
    if check.passed:
        print("  ✅ Solution sets match")
        return True
    print(f"  ❌ Mismatch: {len(check.missing)} missing, "
          f"{len(check.unexpected)} unexpected, {check.duplicates} duplicates")
    for sol in check.missing[:5]:
        print(f"    missing:    {list(sol)}")
    for sol in check.unexpected[:5]:
        print(f"    unexpected: {list(sol)}")
    return False


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Find orderings of the 12 pitch classes whose pairs use "
                    "each of the intervals 3, 4, 5, 7, 8, 9 exactly once"
    )
    parser.add_argument(
        "output",
        help="CSV output file (.csv is appended when no extension is given)"
    )
    parser.add_argument(
        "--start", type=int, default=0,
        help="First scan index (default: 0)"
    )
    parser.add_argument(
        "--stop", type=int, default=MAX_COMBOS,
        help=f"Scan index to stop before (default: {MAX_COMBOS:,})"
    )
    parser.add_argument(
        "--progress-every", type=int, default=DEFAULT_PROGRESS_EVERY,
        help=f"Orderings between progress updates (default: {DEFAULT_PROGRESS_EVERY:,})"
    )
    parser.add_argument(
        "--musicxml", type=str, default=None,
        help="Also write solutions as a MusicXML score to this path"
    )
    parser.add_argument(
        "--musicxml-limit", type=int, default=100,
        help="Maximum number of solutions in the MusicXML score (default: 100)"
    )
    parser.add_argument(
        "--cross-check", action="store_true",
        help="Compare the scan result against a CP-SAT enumeration "
             "(full scans only)"
    )
    parser.add_argument(
        "--quiet", action="store_true",
        help="Suppress progress output"
    )
    args = parser.parse_args(argv)

    if not 0 <= args.start <= args.stop <= MAX_COMBOS:
        print(f"ERROR: need 0 <= start <= stop <= {MAX_COMBOS:,}, "
              f"got start={args.start} stop={args.stop}")
        return 1
    if args.progress_every < 1:
        print("ERROR: --progress-every must be at least 1")
        return 1

    path = resolve_output_path(args.output)
    printer = ProgressPrinter(start=args.start, quiet=args.quiet)
    cancel = threading.Event()
    previous_handler = _install_cancel_handler(cancel)
    try:
        result = scan(
            start=args.start,
            stop=args.stop,
            progress=printer,
            progress_every=args.progress_every,
            cancel=cancel,
        )
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if not args.quiet:
        print()
    status = "Cancelled" if result.cancelled else "Done"
    print(f"{status}: scanned {result.scanned:,} orderings in {result.elapsed:.1f}s, "
          f"found {len(result.solutions):,} solutions")
    if result.cancelled:
        print(f"Resume with: --start {result.next_index} --stop {result.stop}")

    try:
        write_csv(result.solutions, path, progress=printer.saving)
        if not args.quiet and result.solutions:
            print()
        print(f"Wrote {path}")
        if args.musicxml and result.solutions:
            xml_path = write_musicxml(result.solutions, args.musicxml,
                                      limit=args.musicxml_limit)
            print(f"Wrote {xml_path}")
    except OSError as e:
        print(f"ERROR: could not write output: {e}")
        return 1

    if args.cross_check:
        if result.start != 0 or not result.complete or result.stop != MAX_COMBOS:
            print("Skipping cross-check: only a full scan can be compared")
        elif not run_cross_check(result.solutions):
            return 1

    return EXIT_CANCELLED if result.cancelled else 0


if __name__ == "__main__":
    sys.exit(main())
