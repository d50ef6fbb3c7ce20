#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Route schedule propagation and the route feasibility predicate. The predicate never
touches the vehicle, propagation is the only place that writes schedules back.

arrival[0] = time_start of the first node
arrival[i] = max(arrival[i-1] + service[i-1] + distance(i-1, i), time_start[i])


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

from typing import List, Tuple


def propagate_schedule(instance, route: List[int]) -> Tuple[List[float], float]:
    """
    Arrival time at every stop of the route and the load carried after the last stop.

    Args:
        instance: WasteInstance owning the node arena and distances
        route: node ids in visiting order

    Returns:
        (arrival_times, final_load)
    """
    if not route:
        return [], 0.0

    nodes = instance.nodes
    previous = nodes[route[0]]
    arrival = previous.time_start
    arrival_times = [arrival]
    load = 0.0
    for node_id in route[1:]:
        node = nodes[node_id]
        arrival = max(arrival + previous.service_time + instance.distance(previous.id, node_id), node.time_start)
        arrival_times.append(arrival)
        if node.customer:
            load += node.quantity
        else:
            load = 0.0
        previous = node
    return arrival_times, load


def update_arrival_times(instance, vehicle):
    """Write the propagated schedule back into the vehicle"""
    if vehicle.penalty_vehicle:
        # No driving happens here, keep the schedule parallel to the route
        vehicle.arrival_times = [instance.nodes[node_id].time_start for node_id in vehicle.route]
        vehicle.current_time = 0.0
        vehicle.capacity = sum(instance.nodes[node_id].quantity for node_id in vehicle.route)
        return

    vehicle.arrival_times, vehicle.capacity = propagate_schedule(instance, vehicle.route)
    vehicle.current_time = vehicle.arrival_times[-1] if vehicle.arrival_times else 0.0


def route_is_valid(instance, route: List[int], maximum_capacity: float, maximum_stops: float) -> bool:
    """Capacity, stop limit and time windows of a route"""
    if len(route) > maximum_stops:
        return False
    if not route:
        return True

    nodes = instance.nodes
    previous = nodes[route[0]]
    current_time = previous.time_start
    load = 0.0
    for node_id in route[1:]:
        node = nodes[node_id]
        if node.customer:
            load += node.quantity
            if load > maximum_capacity:
                return False
        else:
            load = 0.0

        arrival = current_time + previous.service_time + instance.distance(previous.id, node_id)
        if not instance.time_window_check(arrival, node):
            return False
        current_time = max(arrival, node.time_start)
        previous = node
    return True


def check_validity(instance, vehicle) -> bool:
    """The penalty vehicle has no limits, every other vehicle must satisfy route_is_valid"""
    if vehicle.penalty_vehicle:
        return True
    return route_is_valid(instance, vehicle.route, vehicle.maximum_capacity, vehicle.maximum_stops)


def check_insertion(instance, vehicle, node_id: int, index: int) -> bool:
    """Validity of the vehicle's route with node_id inserted before position index"""
    if vehicle.penalty_vehicle:
        return True
    trial = vehicle.route[:index] + [node_id] + vehicle.route[index:]
    return route_is_valid(instance, trial, vehicle.maximum_capacity, vehicle.maximum_stops)
