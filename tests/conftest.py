import pytest

from wastealns.classes.AlnsProblem import Node, Vehicle, WasteInstance, WasteSolution
from wastealns.classes.Constants import AlnsParameters
from wastealns.functions.InitialSolutions import create_greedy_solution


def build_line_instance(vehicle_count=1, capacity=25, maximum_stops=20, extra_nodes=()):
    """Depot at 0, customers at 10/20/30/40 with demand 10, dumping site at 50"""
    nodes = [Node(0, 0, 0, 0, 0, 1000, 0)]
    for i, x in enumerate((10, 20, 30, 40), 1):
        nodes.append(Node(i, x, 0, 10, 0, 1000, 0))
    nodes.append(Node(5, 50, 0, 2000, 0, 1000, 0))
    for x, quantity, start, end in extra_nodes:
        nodes.append(Node(len(nodes), x, 0, quantity, start, end, 0))
    vehicles = [Vehicle(i, 1, 0, 0, capacity, maximum_stops) for i in range(vehicle_count)]
    return WasteInstance.from_nodes(nodes, vehicles, info="line_4")


SMALL_CUSTOMERS = [(20, 30), (30, 70), (40, 40), (60, 80), (70, 30), (80, 60),
                   (25, 55), (55, 25), (65, 65), (35, 85), (85, 40), (45, 60)]


def build_small_instance():
    """Twelve customers around a central depot, two dumping sites, three trucks"""
    nodes = [Node(0, 50, 50, 0, 0, 1000, 0)]
    for x, y in SMALL_CUSTOMERS:
        nodes.append(Node(len(nodes), x, y, 10, 0, 1000, 5))
    nodes.append(Node(len(nodes), 10, 90, 5000, 0, 1000, 10))
    nodes.append(Node(len(nodes), 90, 10, 5000, 0, 1000, 10))
    vehicles = [Vehicle(i, 1, 0, 0, 40, 15) for i in range(3)]
    return WasteInstance.from_nodes(nodes, vehicles, info="small_12")


@pytest.fixture
def line_instance():
    return build_line_instance()


@pytest.fixture
def line_solution(line_instance):
    return create_greedy_solution(line_instance)


@pytest.fixture
def small_instance():
    return build_small_instance()


@pytest.fixture
def small_solution(small_instance):
    return create_greedy_solution(small_instance)


@pytest.fixture
def penalty_instance():
    """The line instance plus a customer at 500 whose window closes at 10"""
    return build_line_instance(vehicle_count=2, extra_nodes=[(500, 10, 0, 10)])


def all_customers(instance):
    return sorted(node.id for node in instance.customers)


def assert_conserved(solution):
    """Every customer exactly once over the routes and the removal buffer"""
    present = solution.customers_in_routes() + list(solution.removed)
    assert sorted(present) == all_customers(solution.instance), f"Customers lost or duplicated: {present}"


def assert_well_formed(solution):
    instance = solution.instance
    for vehicle in solution.vehicles:
        assert len(vehicle.route) == len(vehicle.arrival_times), f"Vehicle {vehicle.id} schedule out of sync"
        if vehicle.penalty_vehicle or not vehicle.route:
            continue
        assert vehicle.route[0] == instance.depot.id, f"Vehicle {vehicle.id} doesn't start at depot"
        assert vehicle.route[-1] == instance.depot.id, f"Vehicle {vehicle.id} doesn't end at depot"
        assert instance.nodes[vehicle.route[-2]].dumping_site, f"Vehicle {vehicle.id} doesn't unload last"
