#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Greedy nearest-neighbour construction of the initial solution. One vehicle is open at a
time; it drives to the nearest customer it can still serve, unloads at the nearest
dumping site when nothing fits and returns to the depot when even an empty truck cannot
serve anybody. Customers left over when the fleet runs out go to the penalty vehicle.


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

from wastealns.classes.AlnsProblem import Node, Vehicle, WasteInstance, WasteSolution
from wastealns.classes.Constants import AlnsParameters
from wastealns.functions.Feasibility import check_validity


def _start_route(instance: WasteInstance, vehicle: Vehicle):
    depot = instance.depot
    vehicle.route = [depot.id]
    vehicle.arrival_times = [depot.time_start]
    vehicle.current_time = depot.time_start
    vehicle.capacity = 0.0


def _drive(instance: WasteInstance, vehicle: Vehicle, current_node: Node, next_node: Node):
    arrival = vehicle.current_time + current_node.service_time + instance.distance(current_node.id, next_node.id)
    vehicle.current_time = max(arrival, next_node.time_start)
    vehicle.route.append(next_node.id)
    vehicle.arrival_times.append(vehicle.current_time)


def _close_route(instance: WasteInstance, vehicle: Vehicle, current_node: Node):
    """Finish through a dumping site (unless standing on one) and the depot"""
    if not current_node.dumping_site:
        site = instance.nearest_dumping_site(vehicle, current_node)
        _drive(instance, vehicle, current_node, site)
        vehicle.capacity = 0.0
        current_node = site
    _drive(instance, vehicle, current_node, instance.depot)


def create_greedy_solution(instance: WasteInstance, params: AlnsParameters = None) -> WasteSolution:
    """Build the initial solution with the nearest feasible customer rule"""
    if not instance.dumping_sites:
        raise ValueError(f"Instance {instance.info} has no dumping site")

    solution = WasteSolution(instance, params)
    instance.reset_visits()
    depot = instance.depot
    real_vehicles = solution.real_vehicles

    vehicle_idx = 0
    fleet_exhausted = not real_vehicles
    if not fleet_exhausted:
        vehicle = real_vehicles[vehicle_idx]
        _start_route(instance, vehicle)
        current_node = depot

    while not fleet_exhausted and any(not node.visited for node in instance.customers):
        next_node = instance.find_next_node(vehicle, current_node)
        if next_node is not None:
            _drive(instance, vehicle, current_node, next_node)
            vehicle.capacity += next_node.quantity
            next_node.visited = True
            next_node.visited_at = vehicle.current_time
            current_node = next_node
            continue

        if current_node.dumping_site:
            # Even an empty truck cannot serve anybody else, switch vehicles
            _drive(instance, vehicle, current_node, depot)
            vehicle_idx += 1
            if vehicle_idx >= len(real_vehicles):
                fleet_exhausted = True
                break
            vehicle = real_vehicles[vehicle_idx]
            _start_route(instance, vehicle)
            current_node = depot
            continue

        site = instance.nearest_dumping_site(vehicle, current_node)
        _drive(instance, vehicle, current_node, site)
        vehicle.capacity = 0.0
        current_node = site

    if not fleet_exhausted:
        _close_route(instance, vehicle, current_node)

    penalty_vehicle = solution.penalty_vehicle
    for node in instance.customers:
        if not node.visited:
            node.visited = True
            penalty_vehicle.route.append(node.id)

    for empty in real_vehicles:
        if not empty.route:
            _start_route(instance, empty)
            _close_route(instance, empty, depot)

    solution.update_arrival_times()
    solution.calculate_objective()

    for checked in real_vehicles:
        if not check_validity(instance, checked):
            print(f"Vehicle {checked.id} is invalid after greedy construction: {checked.route}")

    return solution
