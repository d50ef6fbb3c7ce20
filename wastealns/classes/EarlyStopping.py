#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Stopping criterion bounding the search by total iterations and by iterations without a
new best solution, with an abort switch for runs that hit an operator fault.


@author: Kreecha_P

MIT License

Copyright (c) 2025 Kreecha Puphaiboon

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""

from alns.stop import StoppingCriterion


class StagnationStoppingCriterion(StoppingCriterion):
    """
    Ends the search after max_iterations iterations, after max_stagnation iterations in a
    row without a new best solution, or once abort() has been requested.

    ALNS asks before every iteration, so the first call only records the initial value and
    current_iteration counts the iterations that have completed.
    """

    def __init__(self, max_iterations: int = 25000, max_stagnation: int = 2000, is_verbose: bool = True):
        if max_iterations < 0 or max_stagnation < 0:
            raise ValueError("max_iterations and max_stagnation must be non-negative")

        self.max_iterations = max_iterations
        self.max_stagnation = max_stagnation
        self.is_verbose = is_verbose

        self.current_iteration = 0
        self.iterations_without_improvement = 0
        self.initial_objective = None
        self.best_objective = None
        self.total_improvements = 0

        self.abort_reason = None
        self.stop_reason = None

    @property
    def aborted(self) -> bool:
        return self.abort_reason is not None

    def abort(self, reason: str):
        """Ask the loop to end at the next check"""
        self.abort_reason = reason

    def _track(self, value: float):
        if self.initial_objective is None:
            self.initial_objective = self.best_objective = value
            return

        self.current_iteration += 1
        if value < self.best_objective:
            self.best_objective = value
            self.total_improvements += 1
            self.iterations_without_improvement = 0
        else:
            self.iterations_without_improvement += 1

    def __call__(self, rng, best, current) -> bool:
        self._track(best.objective())

        if self.aborted:
            self.stop_reason = f"aborted after iteration {self.current_iteration}: {self.abort_reason}"
        elif self.current_iteration >= self.max_iterations:
            self.stop_reason = f"reached maximum iterations ({self.max_iterations})"
        elif self.iterations_without_improvement >= self.max_stagnation:
            self.stop_reason = f"no new best solution for {self.iterations_without_improvement} iterations"
        else:
            return False

        if self.is_verbose:
            self._print_summary()
        return True

    def _print_summary(self):
        print(f"\nStopping: {self.stop_reason}")
        if self.initial_objective is None:
            return
        gain = self.initial_objective - self.best_objective
        share = gain / self.initial_objective * 100 if self.initial_objective > 0 else 0
        print(f"  iterations run:          {self.current_iteration}")
        print(f"  new best solutions:      {self.total_improvements}")
        print(f"  distance saved:          {gain:.2f} ({share:.1f}%)")
        print(f"  iterations since best:   {self.iterations_without_improvement}")
