#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Customer removal operators. Every operator copies the current solution, removes p
customers into the removal buffer of the copy and returns the copy.

p = 4 + floor(u * (max(min(floor(0.4 * n) - 4, 100), 0) + 1)), at most the routed customers


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

from typing import Dict, List, Tuple

import numpy as np

from wastealns.classes.AlnsProblem import Node, Vehicle, WasteSolution


def removal_count(solution: WasteSolution, random_state: np.random.Generator) -> int:
    """Number of customers a removal operator takes out in this iteration"""
    params = solution.params
    n = solution.instance.customer_count
    upper = max(min(int(params.removal_fraction * n) - params.min_removal, params.max_removal), 0)
    p = params.min_removal + int(random_state.random() * (upper + 1))
    return min(p, len(solution.customers_in_routes()))


def customer_positions(solution: WasteSolution) -> List[Tuple[int, int]]:
    """(vehicle index, route position) of every routed customer, penalty stops included"""
    nodes = solution.instance.nodes
    return [(vehicle_idx, position)
            for vehicle_idx, vehicle in enumerate(solution.vehicles)
            for position, node_id in enumerate(vehicle.route)
            if nodes[node_id].customer]


def remove_at(solution: WasteSolution, vehicle_idx: int, position: int) -> int:
    """Move the stop at position into the removal buffer"""
    vehicle = solution.vehicles[vehicle_idx]
    node_id = vehicle.route.pop(position)
    if position < len(vehicle.arrival_times):
        vehicle.arrival_times.pop(position)
    solution.removed.append(node_id)
    return node_id


def removal_saving(solution: WasteSolution, vehicle: Vehicle, position: int) -> float:
    """Distance saved by dropping the stop at position"""
    instance = solution.instance
    if vehicle.penalty_vehicle:
        return solution.params.penalty_factor * instance.max_travel_distance()
    route = vehicle.route
    previous, node_id, following = route[position - 1], route[position], route[position + 1]
    return (instance.distance(previous, node_id) + instance.distance(node_id, following)
            - instance.distance(previous, following))


def relatedness(solution: WasteSolution, a: Node, b: Node, visiting_times: Dict[int, float]) -> float:
    """Smaller is more related"""
    params = solution.params
    return (params.phi * solution.instance.distance(a.id, b.id)
            + params.chi * abs(visiting_times.get(a.id, a.time_start) - visiting_times.get(b.id, b.time_start))
            + params.psi * abs(a.quantity - b.quantity))


def random_removal(current: WasteSolution, random_state: np.random.Generator) -> WasteSolution:
    """Remove p customers chosen uniformly among the routed ones"""
    destroyed = current.copy()
    n_remove = removal_count(destroyed, random_state)

    for _ in range(n_remove):
        positions = customer_positions(destroyed)
        if not positions:
            break
        vehicle_idx, position = positions[random_state.choice(len(positions))]
        remove_at(destroyed, vehicle_idx, position)

    destroyed.update_arrival_times()
    return destroyed


def worst_removal(current: WasteSolution, random_state: np.random.Generator) -> WasteSolution:
    """
    Remove customers whose removal saves the most distance.

    The ranking is sorted by descending saving and index floor(y^p_worst * N) is taken, so
    the worst stop is likely but not certain to go. After each removal only the savings of
    the two former neighbours change.
    """
    destroyed = current.copy()
    n_remove = removal_count(destroyed, random_state)
    p_worst = destroyed.params.p_worst

    candidates = []
    for vehicle_idx, position in customer_positions(destroyed):
        vehicle = destroyed.vehicles[vehicle_idx]
        candidates.append([removal_saving(destroyed, vehicle, position), vehicle_idx, position])

    removed = 0
    while removed < n_remove and candidates:
        candidates.sort(key=lambda candidate: candidate[0], reverse=True)
        pick = int(random_state.random() ** p_worst * len(candidates))
        _, vehicle_idx, position = candidates.pop(pick)
        vehicle = destroyed.vehicles[vehicle_idx]
        remove_at(destroyed, vehicle_idx, position)
        removed += 1

        for candidate in candidates:
            if candidate[1] != vehicle_idx:
                continue
            if candidate[2] > position:
                candidate[2] -= 1
            if not vehicle.penalty_vehicle and candidate[2] in (position - 1, position):
                candidate[0] = removal_saving(destroyed, vehicle, candidate[2])

    destroyed.update_arrival_times()
    return destroyed


def related_removal(current: WasteSolution, random_state: np.random.Generator) -> WasteSolution:
    """
    Shaw style removal: seed with one random customer, then keep removing customers related
    to a random already removed one, relatedness = phi*distance + chi*|dt| + psi*|dq|
    """
    destroyed = current.copy()
    n_remove = removal_count(destroyed, random_state)
    nodes = destroyed.instance.nodes
    related_p = destroyed.params.related_p

    positions = customer_positions(destroyed)
    if n_remove <= 0 or not positions:
        return destroyed

    # Visit times of the schedule before anything is taken out
    visiting_times = destroyed.visiting_times()

    vehicle_idx, position = positions[random_state.choice(len(positions))]
    removed = [remove_at(destroyed, vehicle_idx, position)]

    while len(removed) < n_remove:
        positions = customer_positions(destroyed)
        if not positions:
            break
        reference = nodes[removed[random_state.choice(len(removed))]]
        ranked = sorted(positions,
                        key=lambda pos: relatedness(destroyed, reference,
                                                    nodes[destroyed.vehicles[pos[0]].route[pos[1]]],
                                                    visiting_times))
        pick = int(random_state.random() ** related_p * len(ranked))
        vehicle_idx, position = ranked[pick]
        removed.append(remove_at(destroyed, vehicle_idx, position))

    destroyed.update_arrival_times()
    return destroyed
