"""
CP-SAT model of the interval pair problem.

Independent check on the exhaustive scan: the same constraint stated as a
Constraint Satisfaction Problem for Google OR-Tools, with every solution
enumerated.

1. One variable per position (the pitch class placed there), all different.
2. One variable per pair, its domain the allowed intervals, all different.
3. Each pair variable equals second note minus first note, so descending
   pairs are excluded just as the scan excludes them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ortools.sat.python import cp_model

from interval_search import DEFAULT_SPACE, PAIR_WIDTH, SearchSpace


class _SolutionCollector(cp_model.CpSolverSolutionCallback):
    """Collects the note values of every solution found."""

    def __init__(self, notes):
        cp_model.CpSolverSolutionCallback.__init__(self)
        self._notes = notes
        self.solutions = []

    def on_solution_callback(self):
        self.solutions.append(tuple(self.Value(v) for v in self._notes))


class PairIntervalModel:
    def __init__(self, space: SearchSpace | None = None):
        self.space = space or DEFAULT_SPACE
        self.space.validate()
        self.model = cp_model.CpModel()
        self.solver = cp_model.CpSolver()
        self._failure_stats = None

        size = self.space.size
        self.notes = [self.model.NewIntVar(0, size - 1, f'note_{i}')
                      for i in range(size)]
        self.model.AddAllDifferent(self.notes)

        domain = cp_model.Domain.FromValues(sorted(self.space.allowed))
        self.intervals = []
        for k in range(self.space.pair_count):
            low = self.notes[k * PAIR_WIDTH]
            high = self.notes[k * PAIR_WIDTH + 1]
            interval = self.model.NewIntVarFromDomain(domain, f'interval_{k}')
            self.model.Add(interval == high - low)
            self.intervals.append(interval)
        self.model.AddAllDifferent(self.intervals)

    def solve_all(self, time_limit: float | None = None) -> list[tuple[int, ...]]:
        """
        Enumerate every solution and return them sorted.

        Returns an empty list when the model is infeasible or the time limit
        cuts the search short; the solver status is kept in failure_stats.
        """
        self.solver.parameters.enumerate_all_solutions = True
        if time_limit is not None:
            self.solver.parameters.max_time_in_seconds = time_limit

        collector = _SolutionCollector(self.notes)
        status = self.solver.Solve(self.model, collector)

        if status == cp_model.OPTIMAL:
            self._failure_stats = None
            return sorted(collector.solutions)
        self._failure_stats = {
            'status': self.solver.status_name(status),
            'wall_time': self.solver.wall_time,
            'num_conflicts': self.solver.num_conflicts,
            'num_branches': self.solver.num_branches,
            'partial_count': len(collector.solutions),
        }
        return []

    @property
    def failure_stats(self):
        return self._failure_stats


@dataclass
class CrossCheck:
    """Set comparison between scanned and modelled solutions."""
    scan_count: int
    model_count: int
    missing: list[tuple[int, ...]] = field(default_factory=list)      # in model, not in scan
    unexpected: list[tuple[int, ...]] = field(default_factory=list)   # in scan, not in model
    duplicates: int = 0

    @property
    def passed(self) -> bool:
        return not self.missing and not self.unexpected and self.duplicates == 0


def cross_check(scan_solutions, model_solutions) -> CrossCheck:
    scanned = [tuple(s) for s in scan_solutions]
    modelled = {tuple(s) for s in model_solutions}
    scanned_set = set(scanned)
    return CrossCheck(
        scan_count=len(scanned),
        model_count=len(modelled),
        missing=sorted(modelled - scanned_set),
        unexpected=sorted(scanned_set - modelled),
        duplicates=len(scanned) - len(scanned_set),
    )
