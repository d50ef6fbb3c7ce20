#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Destroy operators working on the dumping site visits. They delete, swap or add a
dumping site stop and evict the customers that no longer fit. Only customers enter the
removal buffer; a dumping site stop that is dropped is gone for good. When the
precondition of an operator is not met the copied solution is returned untouched.


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

import numpy as np

from wastealns.classes.AlnsProblem import Vehicle, WasteSolution
from wastealns.functions.Feasibility import check_validity, propagate_schedule


def _segment_load(solution: WasteSolution, route, start: int, step: int) -> float:
    """Load of the customers next to start, walking in direction step up to the first non-customer"""
    nodes = solution.instance.nodes
    load = 0.0
    position = start
    while 0 <= position < len(route) and nodes[route[position]].customer:
        load += nodes[route[position]].quantity
        position += step
    return load


def _is_late(solution: WasteSolution, route, position: int) -> bool:
    arrival_times, _ = propagate_schedule(solution.instance, route[:position + 1])
    return arrival_times[position] > solution.instance.nodes[route[position]].time_end


def _evict_around(solution: WasteSolution, vehicle: Vehicle, position: int) -> bool:
    """
    Evict customers around the dumping site at position until the route is valid.

    Customers before the site go while the site is reached too late or the stop limit is
    exceeded, then customers after it go while they are reached too late.

    Returns:
        bool: True if the route ended up valid
    """
    instance = solution.instance
    nodes = instance.nodes
    route = vehicle.route

    while ((len(route) > vehicle.maximum_stops or _is_late(solution, route, position))
           and nodes[route[position - 1]].customer):
        position -= 1
        solution.removed.append(route.pop(position))

    while True:
        arrival_times, _ = propagate_schedule(instance, route)
        late = next((i for i in range(position + 1, len(route))
                     if arrival_times[i] > nodes[route[i]].time_end), None)
        if late is None or not nodes[route[late]].customer:
            break
        solution.removed.append(route.pop(late))

    return check_validity(instance, vehicle)


def _restore(solution: WasteSolution, vehicle: Vehicle, route, buffer_size: int):
    vehicle.route = route
    del solution.removed[buffer_size:]


def delete_disposal(current: WasteSolution, random_state: np.random.Generator) -> WasteSolution:
    """
    Drop one dumping site visit of a vehicle that unloads more than once.

    Dropping the last visit before the depot also drops the customers it served. Dropping
    an earlier visit merges two loads, so customers before it are evicted until the merged
    load fits the capacity.
    """
    destroyed = current.copy()
    instance = destroyed.instance
    nodes = instance.nodes

    candidates = []
    for vehicle_idx, vehicle in enumerate(destroyed.real_vehicles):
        positions = vehicle.dumping_site_positions(instance)
        if len(positions) > 1:
            candidates.extend((vehicle_idx, position) for position in positions)
    if not candidates:
        return destroyed

    vehicle_idx, position = candidates[random_state.choice(len(candidates))]
    vehicle = destroyed.vehicles[vehicle_idx]
    route = vehicle.route

    if nodes[route[position + 1]].depot:
        del route[position]
        while nodes[route[position - 1]].customer:
            position -= 1
            destroyed.removed.append(route.pop(position))
    else:
        load = _segment_load(destroyed, route, position - 1, -1) + _segment_load(destroyed, route, position + 1, 1)
        del route[position]
        while load > vehicle.maximum_capacity and nodes[route[position - 1]].customer:
            position -= 1
            node_id = route.pop(position)
            load -= nodes[node_id].quantity
            destroyed.removed.append(node_id)

    destroyed.update_arrival_times()
    return destroyed


def swap_disposal(current: WasteSolution, random_state: np.random.Generator) -> WasteSolution:
    """Replace one dumping site visit by another dumping site and evict what turns late"""
    destroyed = current.copy()
    instance = destroyed.instance
    if len(instance.dumping_sites) < 2:
        return destroyed

    candidates = [(vehicle_idx, position)
                  for vehicle_idx, vehicle in enumerate(destroyed.real_vehicles)
                  if not vehicle.is_empty(instance)
                  for position in vehicle.dumping_site_positions(instance)]
    if not candidates:
        return destroyed

    vehicle_idx, position = candidates[random_state.choice(len(candidates))]
    vehicle = destroyed.vehicles[vehicle_idx]
    others = [site.id for site in instance.dumping_sites if site.id != vehicle.route[position]]
    new_site = others[random_state.choice(len(others))]

    saved_route = vehicle.route[:]
    buffer_size = len(destroyed.removed)
    vehicle.route[position] = new_site
    if not _evict_around(destroyed, vehicle, position):
        _restore(destroyed, vehicle, saved_route, buffer_size)

    destroyed.update_arrival_times()
    return destroyed


def insert_disposal(current: WasteSolution, random_state: np.random.Generator) -> WasteSolution:
    """Add a random dumping site visit before the final depot return and evict what turns late"""
    destroyed = current.copy()
    instance = destroyed.instance

    candidates = [vehicle for vehicle in destroyed.real_vehicles if not vehicle.is_empty(instance)]
    if not candidates or not instance.dumping_sites:
        return destroyed

    vehicle = candidates[random_state.choice(len(candidates))]
    site = instance.dumping_sites[random_state.choice(len(instance.dumping_sites))]

    saved_route = vehicle.route[:]
    buffer_size = len(destroyed.removed)
    position = len(vehicle.route) - 1
    vehicle.route.insert(position, site.id)
    if not _evict_around(destroyed, vehicle, position):
        _restore(destroyed, vehicle, saved_route, buffer_size)

    destroyed.update_arrival_times()
    return destroyed
