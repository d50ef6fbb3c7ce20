#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Run log records of the greedy and ALNS phases. The underscore prefixed keys and the
order of the weight lines are read by the result parsing scripts, keep them stable.


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

from typing import Dict, List

from wastealns.classes.AlnsProblem import Vehicle, WasteInstance, WasteSolution
from wastealns.classes.TextLogger import TextLogger

REPORT_LABELS = {
    'random_removal': 'randomRemove',
    'worst_removal': 'worstRemove',
    'related_removal': 'relatedRemove',
    'delete_disposal': 'deleteDisposal',
    'swap_disposal': 'swapDisposal',
    'insert_disposal': 'insertDisposal',
    'greedy_insert': 'greedyInsert',
    'regret_2_insert': 'regret_2_Insert',
    'regret_3_insert': 'regret_3_Insert',
    'regret_k_insert': 'regret_K_Insert',
}


def route_line(instance: WasteInstance, vehicle: Vehicle, prefix: str = '') -> str:
    tokens = ' '.join(instance.nodes[node_id].label() for node_id in vehicle.route)
    return f"{prefix}Vehicle {vehicle.id}'s route: {tokens} "


def log_routes(logger: TextLogger, solution: WasteSolution, prefix: str = ''):
    """One line per vehicle carrying customers, unused trucks are left out"""
    for vehicle in solution.vehicles:
        if vehicle.route and not vehicle.is_empty(solution.instance):
            logger.log(route_line(solution.instance, vehicle, prefix))


def log_service_times(logger: TextLogger, solution: WasteSolution):
    instance = solution.instance
    penalty_factor = solution.params.penalty_factor
    for vehicle in solution.vehicles:
        if vehicle.is_empty(instance):
            continue
        logger.log(f"Vehicle {vehicle.id}'s service time: {vehicle.travel_distance(instance, penalty_factor)} "
                   f"with {len(vehicle.customers(instance))} customers.")
    logger.log(f"Total travel distance: {solution.objective()}")


def log_greedy_report(logger: TextLogger, solution: WasteSolution):
    log_service_times(logger, solution)
    logger.empty_line()
    logger.log(f"_data: {solution.instance.info}")
    logger.log(f"_greedyDistance: {solution.objective()}")
    logger.log(f"_vehicleCountG: {solution.vehicles_in_use()}")
    log_routes(logger, solution)


def log_alns_report(logger: TextLogger, solution: WasteSolution, iterations: int,
                    accepted_values: List[float], snapshots: List[Dict[str, float]]):
    log_service_times(logger, solution)
    logger.log(f"_ALNSDistance: {solution.objective()}")
    logger.log(f"_iterations: {iterations}")
    logger.log(f"_vehicleCountA: {solution.vehicles_in_use()}")
    logger.log("_values: " + ''.join(f"{value}," for value in accepted_values))
    log_routes(logger, solution, prefix='$')
    logger.log(f"Number of customers on all vehicles: {len(solution.customers_in_routes())}")
    logger.empty_line()
    logger.log("Values in each iteration: " + ' '.join(str(value) for value in accepted_values))
    logger.empty_line()
    logger.log("Weights of each heuristic during:")
    for name, label in REPORT_LABELS.items():
        logger.log(f"{label}: " + ' '.join(str(snapshot[name]) for snapshot in snapshots))
