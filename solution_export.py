"""
Solution writers.

Turns the scan's solution list into human-readable records:
  - CSV: note ids, interval sizes, note names and interval names per row
  - MusicXML (music21): each solution as twelve quarter notes, interval
    names as lyrics under the second note of every pair

API:
    from solution_export import write_csv, write_musicxml
    write_csv(result.solutions, "solutions.csv")
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Callable

import music21

from interval_search import PAIR_WIDTH, SYMBOL_COUNT, pair_intervals

NOTE_NAMES = ['C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B']

INTERVAL_NAMES = {
    0: 'Unison',
    1: 'Minor 2nd',
    2: 'Major 2nd',
    3: 'Minor 3rd',
    4: 'Major 3rd',
    5: 'Perfect 4th',
    6: 'Tritone',
    7: 'Perfect 5th',
    8: 'Minor 6th',
    9: 'Major 6th',
    10: 'Minor 7th',
    11: 'Major 7th',
}

MIDDLE_C = 60


def note_name(symbol: int) -> str:
    return NOTE_NAMES[symbol % 12]


def interval_name(semitones: int) -> str:
    """Name of an ascending interval within the octave; INVALID otherwise."""
    return INTERVAL_NAMES.get(semitones, 'INVALID')


def csv_header(size: int = SYMBOL_COUNT) -> list[str]:
    pairs = size // PAIR_WIDTH
    return (
        [f"Note {i}" for i in range(1, size + 1)]
        + [f"Interval {i}" for i in range(1, pairs + 1)]
        + [f"Note Name {i}" for i in range(1, size + 1)]
        + [f"Interval Name {i}" for i in range(1, pairs + 1)]
    )


def solution_row(solution) -> list:
    intervals = pair_intervals(solution)
    return (
        list(solution)
        + intervals
        + [note_name(s) for s in solution]
        + [interval_name(i) for i in intervals]
    )


def resolve_output_path(path, suffix: str = '.csv') -> Path:
    """Append `suffix` when the chosen file name has no extension."""
    path = Path(path)
    if not path.suffix:
        path = path.with_name(path.name + suffix)
    return path


def write_csv(solutions, path, progress: Callable[[int, int], None] | None = None) -> Path:
    """
    Write one row per solution, truncating any existing file.

    progress(written, total) is called after each row. OSError from the
    filesystem propagates to the caller.
    """
    path = Path(path)
    total = len(solutions)
    size = len(solutions[0]) if solutions else SYMBOL_COUNT
    with open(path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(csv_header(size))
        for i, solution in enumerate(solutions, start=1):
            writer.writerow(solution_row(solution))
            if progress is not None:
                progress(i, total)
    return path


def build_score(solutions, limit: int | None = None):
    """Build a one-part music21 score, one solution after another."""
    if limit is not None:
        solutions = solutions[:limit]

    score = music21.stream.Score()
    part = music21.stream.Part()
    part.partName = 'Interval Pairs'

    for number, solution in enumerate(solutions, start=1):
        for k, symbol in enumerate(solution):
            n = music21.note.Note(MIDDLE_C + symbol)
            n.quarterLength = 1.0
            if k == 0:
                n.addLyric(f"#{number}")
            if k % PAIR_WIDTH == 1:
                n.addLyric(interval_name(symbol - solution[k - 1]))
            part.append(n)

    if len(part):
        part.makeMeasures(inPlace=True)
    score.append(part)
    return score


def write_musicxml(solutions, path, limit: int | None = None) -> Path:
    path = resolve_output_path(path, '.musicxml')
    score = build_score(solutions, limit)
    score.write('musicxml', fp=str(path))
    return path
