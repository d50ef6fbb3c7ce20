#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Data instances The format of the data files is as follows:

The first line gives the dataset tag and the instance info, e.g. "dataset: kim_102"
A line containing "Nodes" starts the node section, one node per line (starting with the depot):
The x coordinate
The y coordinate
The demand (nodes above 1000 are dumping sites)
The earliest arrival
The latest arrival
The service time
A line containing "Vehicles" starts the fleet section, one vehicle per line:
The vehicle type
The departure node id
The arrival node id
The capacity
The maximum number of stops
A line containing "matrix" starts the distance matrix, one row per node


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
import os
from typing import Dict, Iterable, List, Optional

import numpy as np

from wastealns.classes.Constants import AlnsParameters, DUMPING_SITE_THRESHOLD
from wastealns.functions.Feasibility import check_validity, update_arrival_times


class Node:
    """A visitable location: the depot, a dumping site or an ordinary customer"""

    def __init__(self, node_id: int, cx: float, cy: float, quantity: float, time_start: float,
                 time_end: float, service_time: float, dumping_site_threshold: float = DUMPING_SITE_THRESHOLD):
        self.id = node_id
        self.cx = cx
        self.cy = cy
        self.quantity = quantity
        self.time_start = time_start
        self.time_end = time_end
        self.service_time = service_time
        self.depot = node_id == 0
        self.dumping_site = not self.depot and quantity > dumping_site_threshold

        # Bookkeeping of the greedy constructor only
        self.visited = False
        self.visited_at = 0.0

    @property
    def customer(self) -> bool:
        return not self.depot and not self.dumping_site

    def label(self) -> str:
        """Token used when a route is written to the run log"""
        if self.depot:
            return f"DP{self.id}"
        if self.dumping_site:
            return f"DS{self.id}"
        return str(self.id)

    def __repr__(self):
        return f"Node({self.label()})"


class Vehicle:
    """A fleet member: the route as node ids plus the parallel arrival schedule"""

    def __init__(self, vehicle_id: int, vehicle_type: int = 0, departure_node: int = 0, arrival_node: int = 0,
                 maximum_capacity: float = math.inf, maximum_stops: float = math.inf,
                 penalty_vehicle: bool = False):
        self.id = vehicle_id
        self.type = vehicle_type
        self.departure_node = departure_node
        self.arrival_node = arrival_node
        self.maximum_capacity = maximum_capacity
        self.maximum_stops = maximum_stops
        self.penalty_vehicle = penalty_vehicle

        self.route: List[int] = []
        self.arrival_times: List[float] = []

        # Scratch state, left at the values of the last schedule propagation
        self.current_time = 0.0
        self.capacity = 0.0

    def copy(self) -> 'Vehicle':
        """Copy the index lists only, the node payload stays shared"""
        vehicle = Vehicle(self.id, self.type, self.departure_node, self.arrival_node,
                          self.maximum_capacity, self.maximum_stops, self.penalty_vehicle)
        vehicle.route = self.route[:]
        vehicle.arrival_times = self.arrival_times[:]
        vehicle.current_time = self.current_time
        vehicle.capacity = self.capacity
        return vehicle

    def customers(self, instance: 'WasteInstance') -> List[int]:
        return [node_id for node_id in self.route if instance.nodes[node_id].customer]

    def is_empty(self, instance: 'WasteInstance') -> bool:
        return not any(instance.nodes[node_id].customer for node_id in self.route)

    def dumping_site_positions(self, instance: 'WasteInstance') -> List[int]:
        return [i for i, node_id in enumerate(self.route) if instance.nodes[node_id].dumping_site]

    def travel_distance(self, instance: 'WasteInstance', penalty_factor: float = 2.0) -> float:
        """Distance driven along the route; the penalty vehicle pays a fixed price per stored node"""
        if self.penalty_vehicle:
            return penalty_factor * instance.max_travel_distance() * len(self.route)
        if self.is_empty(instance):
            return 0.0
        return sum(instance.distance(a, b) for a, b in zip(self.route, self.route[1:]))

    def route_hash(self) -> str:
        return '-'.join(format(node_id, 'x') for node_id in self.route)

    def __repr__(self):
        kind = "penalty" if self.penalty_vehicle else f"type {self.type}"
        return f"Vehicle({self.id}, {kind}, route={self.route})"


class WasteInstance:
    """Represents a waste collection instance: node arena, fleet specification and distance matrix"""

    def __init__(self, filename: str = None, data: str = None,
                 dumping_site_threshold: float = DUMPING_SITE_THRESHOLD):
        self.filename = None
        self.dumping_site_threshold = dumping_site_threshold
        if filename and not data:
            self.load_from_file(filename)
        elif data and not filename:
            self.parse_data(data)
            self.filename = "from_data"
        elif filename and data:
            # If both are provided, treat 'data' as the folder path and 'filename' as the file
            full_path = os.path.join(data, filename)
            self.load_from_file(full_path)
        else:
            raise ValueError("Either filename or data must be provided")

    @classmethod
    def from_nodes(cls, nodes: List[Node], vehicles: List[Vehicle], distances=None,
                   dataset: str = "dataset", info: str = "custom_0") -> 'WasteInstance':
        """Build an instance from already constructed nodes and vehicles"""
        instance = cls.__new__(cls)
        instance.filename = "from_nodes"
        instance.dumping_site_threshold = DUMPING_SITE_THRESHOLD
        instance.dataset = dataset
        instance.info = info
        instance._setup(nodes, vehicles, distances)
        return instance

    def load_from_file(self, filepath: str):
        """Load instance data from file"""
        self.filename = os.path.basename(filepath)
        try:
            with open(filepath, 'r') as f:
                file_content = f.read()
        except FileNotFoundError:
            raise FileNotFoundError(f"Could not find file: {filepath}")
        self.parse_data(file_content)

    def parse_data(self, data: str):
        """Parse the sectioned text format described in the module docstring"""
        lines = [line.strip() for line in data.strip().splitlines()]
        lines = [line for line in lines if line]
        if not lines or ':' not in lines[0]:
            raise ValueError("First line must look like 'dataset: name_size'")

        dataset, info = lines[0].split(':', 1)
        self.dataset = dataset.strip()
        self.info = info.strip()

        nodes: List[Node] = []
        vehicles: List[Vehicle] = []
        rows: List[List[float]] = []
        section = None
        for line in lines[1:]:
            if 'Nodes' in line:
                section = 'nodes'
                continue
            if 'Vehicles' in line:
                section = 'vehicles'
                continue
            if 'matrix' in line:
                section = 'matrix'
                continue

            parts = line.split()
            try:
                if section == 'nodes':
                    if len(parts) < 6:
                        raise ValueError("node line needs 6 fields")
                    x, y, quantity, start, end, service = (float(p) for p in parts[:6])
                    nodes.append(Node(len(nodes), x, y, quantity, start, end, service,
                                      self.dumping_site_threshold))
                elif section == 'vehicles':
                    if len(parts) < 5:
                        raise ValueError("vehicle line needs 5 fields")
                    vehicles.append(Vehicle(len(vehicles),
                                            vehicle_type=int(parts[0]),
                                            departure_node=int(parts[1]),
                                            arrival_node=int(parts[2]),
                                            maximum_capacity=int(float(parts[3])),
                                            maximum_stops=int(float(parts[4]))))
                elif section == 'matrix':
                    rows.append([float(p) for p in parts])
                else:
                    raise ValueError("data outside of a section")
            except ValueError as e:
                raise ValueError(f"Malformed line '{line}': {e}")

        if not nodes:
            raise ValueError("Instance has no nodes")
        if not vehicles:
            raise ValueError("Instance has no vehicles")

        distances = None
        if rows:
            if len(rows) != len(nodes) or any(len(row) != len(nodes) for row in rows):
                raise ValueError(f"Distance matrix must be {len(nodes)}x{len(nodes)}")
            distances = np.array(rows, dtype=float)

        self._setup(nodes, vehicles, distances)

    def _setup(self, nodes: List[Node], vehicles: List[Vehicle], distances=None):
        self.nodes = nodes
        self.vehicles = vehicles
        self.depot = nodes[0]
        self.customers = [node for node in nodes if node.customer]
        self.dumping_sites = [node for node in nodes if node.dumping_site]
        self.n_customers = len(self.customers)

        if distances is None:
            self.calculate_distances()
        else:
            self.distances = np.asarray(distances, dtype=float)
        # Plain lists are much faster than numpy scalar indexing in the inner loops
        self._distance_rows = self.distances.tolist()
        self._max_distance = float(self.distances.max()) if self.distances.size else 0.0
        self.metric = distances is None or self.satisfies_triangle_inequality()

    def calculate_distances(self):
        """Calculate Euclidean distance matrix"""
        n = len(self.nodes)
        self.distances = np.zeros((n, n))

        for i in range(n):
            for j in range(n):
                if i != j:
                    dx = self.nodes[i].cx - self.nodes[j].cx
                    dy = self.nodes[i].cy - self.nodes[j].cy
                    self.distances[i][j] = math.sqrt(dx * dx + dy * dy)

    def satisfies_triangle_inequality(self, tolerance: float = 1e-9) -> bool:
        """d(i, j) <= d(i, k) + d(k, j) for every triple, checked one intermediate node at a time"""
        d = self.distances
        for k in range(len(d)):
            if np.any(d > d[:, k:k + 1] + d[k:k + 1, :] + tolerance):
                return False
        return True

    @property
    def customer_count(self) -> int:
        return self.n_customers

    def distance(self, a: int, b: int) -> float:
        return self._distance_rows[a][b]

    def max_travel_distance(self) -> float:
        return self._max_distance

    @staticmethod
    def time_window_check(arrival: float, node: Node) -> bool:
        """Early arrival is fine, the service just waits for time_start"""
        return arrival <= node.time_end

    def create_fleet(self) -> List[Vehicle]:
        """Fresh copies of the parsed fleet with the penalty vehicle in the last slot"""
        fleet = [vehicle.copy() for vehicle in self.vehicles]
        for vehicle in fleet:
            vehicle.route = []
            vehicle.arrival_times = []
        fleet.append(Vehicle(len(fleet), vehicle_type=-1, penalty_vehicle=True))
        return fleet

    def reset_visits(self):
        for node in self.nodes:
            node.visited = False
            node.visited_at = 0.0

    def _can_close_route(self, node: Node, time: float) -> bool:
        """True if some dumping site and then the depot are reachable after serving node"""
        for site in self.dumping_sites:
            arrival = time + node.service_time + self.distance(node.id, site.id)
            if not self.time_window_check(arrival, site):
                continue
            back = max(arrival, site.time_start) + site.service_time + self.distance(site.id, self.depot.id)
            if self.time_window_check(back, self.depot):
                return True
        return False

    def nearest_dumping_site(self, vehicle: Vehicle, from_node: Node,
                             excluded: Iterable[int] = ()) -> Optional[Node]:
        """
        Nearest dumping site to from_node for the vehicle at its current time.

        Sites from which the depot can still be reached in time are preferred, then sites
        that can merely be reached in time, then the plainly nearest one.
        """
        excluded = set(excluded)
        candidates = [site for site in self.dumping_sites if site.id not in excluded]
        if not candidates:
            return None

        def key(site):
            return self.distance(from_node.id, site.id)

        reachable = []
        closable = []
        for site in candidates:
            arrival = vehicle.current_time + from_node.service_time + self.distance(from_node.id, site.id)
            if not self.time_window_check(arrival, site):
                continue
            reachable.append(site)
            back = max(arrival, site.time_start) + site.service_time + self.distance(site.id, self.depot.id)
            if self.time_window_check(back, self.depot):
                closable.append(site)

        for pool in (closable, reachable, candidates):
            if pool:
                return min(pool, key=key)
        return None

    def find_next_node(self, vehicle: Vehicle, current_node: Node) -> Optional[Node]:
        """
        Nearest unvisited customer the vehicle can serve next.

        The customer must fit the remaining capacity and its time window, leave room for a
        dumping site and the depot under the stop limit, and still allow the route to be
        closed through a dumping site and the depot in time.
        """
        if len(vehicle.route) + 3 > vehicle.maximum_stops:
            return None

        best_node = None
        best_distance = math.inf
        for node in self.customers:
            if node.visited:
                continue
            if vehicle.capacity + node.quantity > vehicle.maximum_capacity:
                continue
            distance = self.distance(current_node.id, node.id)
            if distance >= best_distance:
                continue
            arrival = vehicle.current_time + current_node.service_time + distance
            if not self.time_window_check(arrival, node):
                continue
            if not self._can_close_route(node, max(arrival, node.time_start)):
                continue
            best_node = node
            best_distance = distance
        return best_node

    def to_text(self) -> str:
        """Render the instance back into the text format it is parsed from"""
        lines = [f"{self.dataset}: {self.info}", "Nodes"]
        for node in self.nodes:
            lines.append(' '.join(str(v) for v in (node.cx, node.cy, node.quantity, node.time_start,
                                                  node.time_end, node.service_time)))
        lines.append("Vehicles")
        for vehicle in self.vehicles:
            lines.append(' '.join(str(v) for v in (vehicle.type, vehicle.departure_node, vehicle.arrival_node,
                                                  vehicle.maximum_capacity, vehicle.maximum_stops)))
        lines.append("Distance matrix")
        for row in self._distance_rows:
            lines.append(' '.join(str(v) for v in row))
        return '\n'.join(lines) + '\n'

    def __repr__(self):
        return (f"WasteInstance({self.info}, {len(self.nodes)} nodes, {self.n_customers} customers, "
                f"{len(self.dumping_sites)} dumping sites, {len(self.vehicles)} vehicles)")


class WasteSolution:
    """Represents a solution: one route per fleet member and the removal buffer of the current iteration"""

    def __init__(self, instance: WasteInstance, params: AlnsParameters = None, vehicles: List[Vehicle] = None):
        self.instance = instance
        self.params = params or AlnsParameters()
        self.vehicles = vehicles if vehicles is not None else instance.create_fleet()
        self.removed: List[int] = []
        self.aborted = False
        self._objective_value = float('inf')

    def copy(self):
        """Copy the route and schedule lists; nodes, instance and parameters stay shared"""
        new_solution = WasteSolution(self.instance, self.params, [vehicle.copy() for vehicle in self.vehicles])
        new_solution.removed = self.removed[:]
        new_solution._objective_value = self._objective_value
        return new_solution

    def objective(self):
        """Return the objective value (ALNS expects this as a method)"""
        return self._objective_value

    def calculate_objective(self):
        """Sum of travel distances, the penalty vehicle included"""
        if self.aborted:
            self._objective_value = float('inf')
            return self._objective_value

        self._objective_value = sum(vehicle.travel_distance(self.instance, self.params.penalty_factor)
                                    for vehicle in self.vehicles)
        return self._objective_value

    def mark_aborted(self):
        """Flag a candidate produced by a failed operator so it can never be accepted"""
        self.aborted = True
        self._objective_value = float('inf')

    @property
    def penalty_vehicle(self) -> Vehicle:
        return self.vehicles[-1]

    @property
    def real_vehicles(self) -> List[Vehicle]:
        return self.vehicles[:-1]

    def customers_in_routes(self) -> List[int]:
        """Customer ids over every route, the penalty vehicle included"""
        customers = []
        for vehicle in self.vehicles:
            customers.extend(vehicle.customers(self.instance))
        return customers

    def vehicles_in_use(self) -> int:
        return sum(1 for vehicle in self.vehicles if not vehicle.is_empty(self.instance))

    def visiting_times(self) -> Dict[int, float]:
        """Arrival time of every routed customer; penalty stops report their window start"""
        times = {}
        for vehicle in self.vehicles:
            for node_id, arrival in zip(vehicle.route, vehicle.arrival_times):
                if self.instance.nodes[node_id].customer:
                    times[node_id] = arrival
        return times

    def update_arrival_times(self):
        for vehicle in self.vehicles:
            update_arrival_times(self.instance, vehicle)

    def is_feasible(self) -> bool:
        return all(check_validity(self.instance, vehicle) for vehicle in self.real_vehicles)

    def solution_hash(self) -> str:
        """Order sensitive: the same routes carried by other vehicle slots hash differently"""
        return '|'.join(vehicle.route_hash() for vehicle in self.vehicles)

    def __repr__(self):
        return f"WasteSolution(objective={self._objective_value:.2f}, vehicles={self.vehicles_in_use()})"
