#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Repair operators: greedy insertion and regret-k insertion of the removal buffer.

A customer can go before any stop at positions 1 .. len(route) - 2, so it is always
followed by a dumping site before the depot. Every trial position is checked with the
route feasibility predicate. The penalty vehicle takes any customer at
penalty_factor * max travel distance, so both operators always empty the buffer.


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

from typing import List, Optional, Tuple

import numpy as np

from wastealns.classes.AlnsProblem import Vehicle, WasteSolution
from wastealns.classes.NodeSwap import NodeSwap
from wastealns.functions.Feasibility import check_insertion, update_arrival_times


def candidate_vehicles(solution: WasteSolution) -> List[int]:
    """Every used real vehicle plus one representative per kind of empty vehicle"""
    instance = solution.instance
    seen = set()
    indices = []
    for vehicle_idx, vehicle in enumerate(solution.real_vehicles):
        if vehicle.is_empty(instance):
            signature = (vehicle.maximum_capacity, vehicle.maximum_stops, tuple(vehicle.route))
            if signature in seen:
                continue
            seen.add(signature)
        indices.append(vehicle_idx)
    return indices


def insertion_cost(solution: WasteSolution, vehicle: Vehicle, node_id: int, index: int) -> float:
    instance = solution.instance
    previous, following = vehicle.route[index - 1], vehicle.route[index]
    return (instance.distance(previous, node_id) + instance.distance(node_id, following)
            - instance.distance(previous, following))


def evaluate_position(solution: WasteSolution, vehicle: Vehicle, node_id: int, index: int) -> Optional[float]:
    """Cost of inserting node_id before position index, None when out of range or infeasible"""
    if not 1 <= index <= len(vehicle.route) - 2:
        return None
    if not check_insertion(solution.instance, vehicle, node_id, index):
        return None
    return insertion_cost(solution, vehicle, node_id, index)


def best_position(solution: WasteSolution, vehicle: Vehicle, node_id: int) -> Optional[Tuple[int, float]]:
    """Cheapest feasible (index, cost) in the vehicle's route, None if there is none"""
    instance = solution.instance
    nodes = instance.nodes
    node = nodes[node_id]
    route = vehicle.route
    arrival_times = vehicle.arrival_times

    best = None
    for index in range(1, len(route) - 1):
        previous = nodes[route[index - 1]]
        following = nodes[route[index]]
        arrival = arrival_times[index - 1] + previous.service_time + instance.distance(previous.id, node_id)
        if arrival > node.time_end:
            # Later positions can only be reached later when the triangle inequality holds
            if instance.metric:
                break
            continue
        if node.time_start > following.time_end:
            continue

        cost = insertion_cost(solution, vehicle, node_id, index)
        if best is not None and cost >= best[1]:
            continue
        if not check_insertion(instance, vehicle, node_id, index):
            continue
        best = (index, cost)
    return best


def penalty_swap(solution: WasteSolution, node_id: int) -> NodeSwap:
    cost = solution.params.penalty_factor * solution.instance.max_travel_distance()
    return NodeSwap(node_id, len(solution.vehicles) - 1, -1, cost, True)


def best_swap(solution: WasteSolution, node_id: int, vehicle_indices: List[int]) -> NodeSwap:
    """Cheapest position over the given vehicles, the penalty vehicle as fallback"""
    swap = penalty_swap(solution, node_id)
    for vehicle_idx in vehicle_indices:
        found = best_position(solution, solution.vehicles[vehicle_idx], node_id)
        if found is not None:
            swap.improve(vehicle_idx, found[0], found[1])
    return swap


def apply_swap(solution: WasteSolution, swap: NodeSwap):
    """Insert the node, take it out of the buffer and refresh the vehicle schedule"""
    vehicle = solution.vehicles[swap.vehicle]
    if vehicle.penalty_vehicle:
        vehicle.route.append(swap.node)
    else:
        vehicle.route.insert(swap.index, swap.node)
    update_arrival_times(solution.instance, vehicle)
    solution.removed.remove(swap.node)


def greedy_insert(destroyed: WasteSolution, random_state: np.random.Generator) -> WasteSolution:
    """
    Repeatedly insert the globally cheapest node/position pair.

    After an insertion only the affected candidates are refreshed: nodes whose best position
    was in the modified vehicle are evaluated again from scratch, every other node only
    checks the two new positions next to the inserted node.
    """
    repaired = destroyed.copy()
    vehicle_indices = candidate_vehicles(repaired)
    pending = {node_id: best_swap(repaired, node_id, vehicle_indices) for node_id in repaired.removed}

    while pending:
        # min keeps buffer order on ties
        swap = min(pending.values(), key=lambda candidate: candidate.value)
        del pending[swap.node]
        apply_swap(repaired, swap)

        vehicle = repaired.vehicles[swap.vehicle]
        if vehicle.penalty_vehicle:
            continue

        vehicle_indices = candidate_vehicles(repaired)
        for node_id in list(pending):
            other = pending[node_id]
            if other.vehicle == swap.vehicle:
                pending[node_id] = best_swap(repaired, node_id, vehicle_indices)
                continue
            for index in (swap.index, swap.index + 1):
                cost = evaluate_position(repaired, vehicle, node_id, index)
                if cost is not None:
                    other.improve(swap.vehicle, index, cost)

    repaired.calculate_objective()
    return repaired


def regret_record(solution: WasteSolution, node_id: int, vehicle_indices: List[int]) -> NodeSwap:
    """Best position per vehicle, penalty vehicle included, sorted by ascending cost"""
    record = NodeSwap(node_id)
    for vehicle_idx in vehicle_indices:
        found = best_position(solution, solution.vehicles[vehicle_idx], node_id)
        if found is not None:
            record.regret_list.append(NodeSwap(node_id, vehicle_idx, found[0], found[1], True))
    record.regret_list.append(penalty_swap(solution, node_id))
    record.sort_regret_list()
    return record


def regret_insert(destroyed: WasteSolution, random_state: np.random.Generator, k: int = 2) -> WasteSolution:
    """
    Regret-k insertion.

    Nodes with fewer than k possible vehicles go first, fewest vehicles first. Among the
    nodes considered the one with the largest regret sum(cost[i] - cost[0], i < k) is
    inserted at its best position, ties broken by the smaller best cost.
    """
    repaired = destroyed.copy()
    vehicle_indices = candidate_vehicles(repaired)
    records = [regret_record(repaired, node_id, vehicle_indices) for node_id in repaired.removed]

    while records:
        least = min(record.feasible_vehicle_count for record in records)
        if least < k:
            pool = [record for record in records if record.feasible_vehicle_count == least]
            depth = least
        else:
            pool = records
            depth = k

        chosen = max(pool, key=lambda record: (record.regret_sum(depth), -record.best.value))
        records.remove(chosen)
        swap = chosen.best
        apply_swap(repaired, swap)

        if repaired.vehicles[swap.vehicle].penalty_vehicle:
            continue

        # A vehicle that just got its first customer can expose another empty representative
        new_indices = candidate_vehicles(repaired)
        refresh = [swap.vehicle] + [idx for idx in new_indices if idx not in vehicle_indices]
        vehicle_indices = new_indices
        for record in records:
            for vehicle_idx in refresh:
                record.drop_vehicle(vehicle_idx)
                found = best_position(repaired, repaired.vehicles[vehicle_idx], record.node)
                if found is not None:
                    record.regret_list.append(NodeSwap(record.node, vehicle_idx, found[0], found[1], True))
            record.sort_regret_list()

    repaired.calculate_objective()
    return repaired


def regret_2_insert(destroyed: WasteSolution, random_state: np.random.Generator) -> WasteSolution:
    return regret_insert(destroyed, random_state, k=2)


def regret_3_insert(destroyed: WasteSolution, random_state: np.random.Generator) -> WasteSolution:
    return regret_insert(destroyed, random_state, k=3)


def regret_k_insert(destroyed: WasteSolution, random_state: np.random.Generator) -> WasteSolution:
    """Regret over every vehicle: k is the number of customers of the instance"""
    return regret_insert(destroyed, random_state, k=max(destroyed.instance.customer_count, 1))
