#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Console progress and the accepted-value trace, fed by the ALNS outcome callbacks.


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

from alns import ALNS


class ALNSProgressLogger:
    """
    Keeps the value of every solution the search moves to and prints progress lines.

    accepted_values[0] and best_objectives[0] are the initial solution, one entry follows
    for every BEST, BETTER or ACCEPT outcome.
    """

    def __init__(self, log_mode: str = 'interval', interval: int = 100, is_verbose: bool = True):
        """
        Args:
            log_mode: 'interval' prints every interval accepted solutions, 'improvement' on each new best
            interval: accepted solutions between two progress lines
            is_verbose: print anything at all
        """
        self.log_mode = log_mode
        self.interval = interval
        self.is_verbose = is_verbose

        self.accepted_count = 0
        self.accepted_values = []
        self.best_objectives = []
        # accepted_count at each new best
        self.improvements = []
        self.initial_objective = None
        self.best_state = None

    def attach(self, alns: ALNS):
        """Register on every outcome that moves the current solution"""
        alns.on_best(self.log_progress)
        alns.on_better(self.log_progress)
        alns.on_accept(self.log_progress)

    def start(self, initial_solution):
        self.initial_objective = initial_solution.objective()
        self.accepted_values = [self.initial_objective]
        self.best_objectives = [self.initial_objective]
        self.best_state = initial_solution

    def log_progress(self, candidate_solution, random_state, **kwargs):
        """ALNS callback, random_state and kwargs are part of the callback signature only"""
        if self.initial_objective is None:
            self.start(candidate_solution)
            return

        self.accepted_count += 1
        value = candidate_solution.objective()
        self.accepted_values.append(value)

        is_new_best = value < self.best_objectives[-1]
        self.best_objectives.append(min(value, self.best_objectives[-1]))
        if is_new_best:
            self.best_state = candidate_solution
            self.improvements.append(self.accepted_count)

        if not self.is_verbose:
            return
        if self.log_mode == 'improvement' and is_new_best:
            self._print_new_best(candidate_solution)
        elif self.log_mode == 'interval' and self.accepted_count % self.interval == 0:
            self._print_interval()

    def gain(self) -> float:
        """Relative improvement of the best value over the initial one, in percent"""
        if not self.initial_objective:
            return 0.0
        return (self.initial_objective - self.best_objectives[-1]) / self.initial_objective * 100

    def _print_interval(self):
        line = (f"[{self.accepted_count:6d} accepted] current {self.accepted_values[-1]:10.2f}"
                f"  best {self.best_objectives[-1]:10.2f}")
        if self.improvements:
            line += f"  (last new best {self.accepted_count - self.improvements[-1]} accepted ago)"
        print(line)

    def _print_new_best(self, solution):
        print(f"New best {self.best_objectives[-1]:.2f} at accepted solution {self.accepted_count}: "
              f"{solution.vehicles_in_use()} vehicles, {len(solution.penalty_vehicle.route)} penalty stops, "
              f"{self.gain():.1f}% below greedy")

    def final_report(self):
        if not self.is_verbose or self.best_state is None:
            return

        best = self.best_state
        print()
        print("-" * 60)
        print(f"Greedy value:         {self.initial_objective:.2f}")
        print(f"Best value:           {self.best_objectives[-1]:.2f} ({self.gain():.1f}% better)")
        print(f"Vehicles in use:      {best.vehicles_in_use()}")
        print(f"Penalty stops:        {len(best.penalty_vehicle.route)}")
        print(f"Accepted solutions:   {self.accepted_count}, {len(self.improvements)} of them new bests")
        print("-" * 60)
