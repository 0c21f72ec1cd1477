#!/usr/bin/env python3
"""
Tests for the CSV and MusicXML solution writers.

Usage:
    python test_solution_export.py
"""

import csv
import sys
import tempfile
from pathlib import Path

from solution_export import (
    build_score, csv_header, interval_name, note_name, resolve_output_path,
    solution_row, write_csv, write_musicxml,
)

KNOWN_SOLUTION = (2, 11, 1, 9, 0, 7, 5, 10, 4, 8, 3, 6)
OTHER_SOLUTION = (0, 7, 1, 9, 2, 11, 5, 10, 4, 8, 3, 6)


def test_names():
    print("Test 1: Note and interval names")

    assert note_name(0) == 'C'
    assert note_name(1) == 'C#'
    assert note_name(11) == 'B'
    assert [interval_name(i) for i in (3, 4, 5, 7, 8, 9)] == [
        'Minor 3rd', 'Major 3rd', 'Perfect 4th',
        'Perfect 5th', 'Minor 6th', 'Major 6th',
    ]
    assert interval_name(6) == 'Tritone'
    assert interval_name(-3) == 'INVALID'

    print("  PASSED")


def test_header_and_row():
    print("Test 2: CSV header and row layout")

    header = csv_header()
    assert len(header) == 36
    assert header[0] == 'Note 1' and header[11] == 'Note 12'
    assert header[12] == 'Interval 1' and header[17] == 'Interval 6'
    assert header[18] == 'Note Name 1' and header[-1] == 'Interval Name 6'

    row = solution_row(KNOWN_SOLUTION)
    assert len(row) == 36
    assert row[:12] == list(KNOWN_SOLUTION)
    assert row[12:18] == [9, 8, 7, 5, 4, 3]
    assert row[18:30] == ['D', 'B', 'C#', 'A', 'C', 'G',
                          'F', 'A#', 'E', 'G#', 'D#', 'F#']
    assert row[30] == 'Major 6th' and row[35] == 'Minor 3rd'

    assert len(csv_header(4)) == 12

    print("  PASSED")


def test_resolve_output_path():
    print("Test 3: Output path extension")

    assert resolve_output_path('solutions') == Path('solutions.csv')
    assert resolve_output_path('out/solutions.txt') == Path('out/solutions.txt')
    assert resolve_output_path('score', '.musicxml') == Path('score.musicxml')

    print("  PASSED")


def test_write_csv():
    print("Test 4: write_csv")

    calls = []
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / 'solutions.csv'
        path.write_text("stale contents\n" * 10)
        result = write_csv([KNOWN_SOLUTION, OTHER_SOLUTION], path,
                           progress=lambda i, n: calls.append((i, n)))
        assert result == path
        with open(path, newline='') as f:
            rows = list(csv.reader(f))

    assert rows[0] == csv_header()
    assert len(rows) == 3
    assert rows[1][:12] == [str(s) for s in KNOWN_SOLUTION]
    assert rows[2][12:18] == ['7', '8', '9', '5', '4', '3']
    assert calls == [(1, 2), (2, 2)]

    # No solutions still writes the header
    with tempfile.TemporaryDirectory() as tmp:
        path = write_csv([], Path(tmp) / 'empty.csv')
        assert path.read_text().splitlines() == [','.join(csv_header())]

    # Unwritable location raises
    with tempfile.TemporaryDirectory() as tmp:
        try:
            write_csv([KNOWN_SOLUTION], Path(tmp) / 'missing' / 'out.csv')
            raise AssertionError("Expected OSError for missing directory")
        except OSError:
            pass

    print("  PASSED")


def test_build_score():
    print("Test 5: build_score")

    score = build_score([KNOWN_SOLUTION, OTHER_SOLUTION])
    notes = list(score.recurse().notes)
    assert len(notes) == 24
    assert [n.pitch.midi for n in notes[:12]] == [60 + s for s in KNOWN_SOLUTION]
    assert notes[0].lyrics[0].text == '#1'
    assert notes[1].lyrics[0].text == 'Major 6th'
    assert notes[13].lyrics[0].text == 'Perfect 5th'
    assert notes[2].lyrics == []

    limited = build_score([KNOWN_SOLUTION, OTHER_SOLUTION], limit=1)
    assert len(list(limited.recurse().notes)) == 12

    print("  PASSED")


def test_write_musicxml():
    print("Test 6: write_musicxml")

    with tempfile.TemporaryDirectory() as tmp:
        path = write_musicxml([KNOWN_SOLUTION], Path(tmp) / 'pairs')
        assert path.suffix == '.musicxml'
        assert path.exists()
        assert '<score-partwise' in path.read_text()

    print("  PASSED")


# ============================================================================
# RUNNER
# ============================================================================

def main():
    print("=" * 70)
    print("SOLUTION EXPORT TESTS")
    print("=" * 70)
    print()

    tests = [
        test_names,
        test_header_and_row,
        test_resolve_output_path,
        test_write_csv,
        test_build_score,
        test_write_musicxml,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            print(f"  FAILED: {e}")
            failed += 1
        except Exception as e:
            print(f"  ERROR: {type(e).__name__}: {e}")
            failed += 1

    print()
    print("=" * 70)
    print(f"Results: {passed}/{passed + failed} passed, {failed} failed")
    print("=" * 70)

    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
