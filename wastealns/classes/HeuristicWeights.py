#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Adaptive operator weights plugged into the ALNS library as an operator selection scheme.

Scores per iteration, given to the destroy and the repair operator that produced the candidate:
    sigma_1  new global best
    sigma_2  better than the current solution and never seen before
    sigma_3  accepted by simulated annealing and never seen before
Rejected candidates score nothing. After every segment the weights are smoothed:
    weight = weight * (1 - r) + r * score / times_used


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

from typing import Dict, List, Sequence

import numpy as np
from alns.Outcome import Outcome
from alns.select import OperatorSelectionScheme

from wastealns.classes.Constants import AlnsParameters, DESTROY_OPERATOR_NAMES, REPAIR_OPERATOR_NAMES


class HeuristicWeights(OperatorSelectionScheme):
    """Roulette wheel over adaptive weights with novelty aware scoring"""

    def __init__(self, params: AlnsParameters = None,
                 destroy_names: Sequence[str] = DESTROY_OPERATOR_NAMES,
                 repair_names: Sequence[str] = REPAIR_OPERATOR_NAMES,
                 logger=None):
        """
        Args:
            params: scores, reaction factor and segment length
            destroy_names: destroy operator names, in the order they are added to ALNS
            repair_names: repair operator names, in the order they are added to ALNS
            logger: optional TextLogger receiving one line per iteration
        """
        super().__init__(len(destroy_names), len(repair_names))
        self.params = params or AlnsParameters()
        self.destroy_names = list(destroy_names)
        self.repair_names = list(repair_names)
        self.logger = logger

        self.destroy_weights = np.ones(len(self.destroy_names))
        self.repair_weights = np.ones(len(self.repair_names))
        self.destroy_scores = np.zeros(len(self.destroy_names))
        self.repair_scores = np.zeros(len(self.repair_names))
        self.destroy_used = np.zeros(len(self.destroy_names), dtype=int)
        self.repair_used = np.zeros(len(self.repair_names), dtype=int)

        # Operators picked for the running iteration
        self.current_remove = None
        self.current_insert = None

        self.seen_hashes = set()
        self.iteration = 0
        self.snapshots: List[Dict[str, float]] = [self.weights_snapshot()]

    def register_solution(self, state):
        """Mark a solution as seen, e.g. the initial one"""
        self.seen_hashes.add(state.solution_hash())

    def __call__(self, rng, best, curr):
        self.current_remove = int(rng.choice(len(self.destroy_weights),
                                             p=self.destroy_weights / self.destroy_weights.sum()))
        self.current_insert = int(rng.choice(len(self.repair_weights),
                                             p=self.repair_weights / self.repair_weights.sum()))
        return self.current_remove, self.current_insert

    def score(self, candidate, outcome: Outcome) -> float:
        if outcome == Outcome.BEST:
            self.seen_hashes.add(candidate.solution_hash())
            return self.params.sigma_1
        if outcome == Outcome.REJECT:
            return 0.0

        solution_hash = candidate.solution_hash()
        if solution_hash in self.seen_hashes:
            return 0.0
        self.seen_hashes.add(solution_hash)
        return self.params.sigma_2 if outcome == Outcome.BETTER else self.params.sigma_3

    def update(self, candidate, d_idx, r_idx, outcome):
        score = self.score(candidate, outcome)
        self.destroy_scores[d_idx] += score
        self.repair_scores[r_idx] += score
        self.destroy_used[d_idx] += 1
        self.repair_used[r_idx] += 1
        self.iteration += 1

        if self.logger is not None:
            self.logger.log(f"Iteration {self.iteration}: {self.destroy_names[d_idx]} + "
                            f"{self.repair_names[r_idx]} -> {candidate.objective():.2f} "
                            f"({Outcome(outcome).name.lower()}, score {score:g})")

        if self.iteration % self.params.segment_length == 0:
            self.update_weights()

    def update_weights(self):
        """Smooth the weights toward the segment performance, then start a new segment"""
        r = self.params.reaction_factor
        for weights, scores, used in ((self.destroy_weights, self.destroy_scores, self.destroy_used),
                                      (self.repair_weights, self.repair_scores, self.repair_used)):
            # Operators not picked during the segment keep their weight
            mask = used > 0
            weights[mask] = weights[mask] * (1 - r) + r * scores[mask] / used[mask]
            scores[:] = 0.0
            used[:] = 0

        self.snapshots.append(self.weights_snapshot())

    def weights_snapshot(self) -> Dict[str, float]:
        snapshot = dict(zip(self.destroy_names, self.destroy_weights.tolist()))
        snapshot.update(zip(self.repair_names, self.repair_weights.tolist()))
        return snapshot
