#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Insertion candidates of the repair operators.


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

import math
from typing import List, Optional


class NodeSwap:
    """
    Insert node into vehicle before position index at cost value.

    For regret insertion the record of a node also carries its regret list: the best
    position in every vehicle that can take the node, sorted by ascending cost.
    """

    def __init__(self, node: int, vehicle: Optional[int] = None, index: int = -1,
                 value: float = math.inf, feasible: bool = False):
        self.node = node
        self.vehicle = vehicle
        self.index = index
        self.value = value
        self.feasible = feasible
        self.regret_list: List['NodeSwap'] = []

    def improve(self, vehicle: int, index: int, value: float) -> bool:
        """Take the position if it is cheaper than the current one"""
        if value < self.value:
            self.vehicle = vehicle
            self.index = index
            self.value = value
            self.feasible = True
            return True
        return False

    def sort_regret_list(self):
        self.regret_list.sort(key=lambda swap: swap.value)

    def drop_vehicle(self, vehicle: int):
        self.regret_list = [swap for swap in self.regret_list if swap.vehicle != vehicle]

    @property
    def feasible_vehicle_count(self) -> int:
        return len(self.regret_list)

    @property
    def best(self) -> 'NodeSwap':
        return self.regret_list[0]

    def regret_sum(self, k: int) -> float:
        """Sum of cost[i] - cost[0] for i < k over the sorted regret list"""
        costs = [swap.value for swap in self.regret_list[:k]]
        if not costs:
            return 0.0
        return sum(cost - costs[0] for cost in costs[1:])

    def __repr__(self):
        return f"NodeSwap(node={self.node}, vehicle={self.vehicle}, index={self.index}, value={self.value:.2f})"
