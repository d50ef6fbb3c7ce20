import pytest

from conftest import build_line_instance
from wastealns.classes.AlnsProblem import Vehicle, WasteInstance, WasteSolution


def test_node_roles(line_instance):
    nodes = line_instance.nodes
    assert nodes[0].depot and not nodes[0].dumping_site
    assert nodes[5].dumping_site and not nodes[5].customer
    assert [node.id for node in line_instance.customers] == [1, 2, 3, 4]
    assert [node.id for node in line_instance.dumping_sites] == [5]
    assert line_instance.customer_count == 4
    assert nodes[0].label() == "DP0" and nodes[5].label() == "DS5" and nodes[3].label() == "3"


def test_euclidean_distances(line_instance):
    assert line_instance.distance(0, 5) == pytest.approx(50.0)
    assert line_instance.distance(2, 4) == pytest.approx(20.0)
    assert line_instance.max_travel_distance() == pytest.approx(50.0)


def test_time_window_check_allows_early_arrival(line_instance):
    node = line_instance.nodes[1]
    node_late = line_instance.nodes[2]
    assert WasteInstance.time_window_check(-5.0, node)
    assert WasteInstance.time_window_check(1000.0, node)
    assert not WasteInstance.time_window_check(1000.5, node_late)


def test_fleet_gets_penalty_vehicle_last(line_instance):
    fleet = line_instance.create_fleet()
    assert len(fleet) == len(line_instance.vehicles) + 1
    assert fleet[-1].penalty_vehicle
    assert not any(vehicle.penalty_vehicle for vehicle in fleet[:-1])


def test_text_round_trip(small_instance):
    parsed = WasteInstance(data=small_instance.to_text())
    assert parsed.info == small_instance.info
    assert len(parsed.nodes) == len(small_instance.nodes)
    assert [node.id for node in parsed.dumping_sites] == [node.id for node in small_instance.dumping_sites]
    assert [vehicle.maximum_capacity for vehicle in parsed.vehicles] == [40, 40, 40]
    assert parsed.distance(3, 7) == pytest.approx(small_instance.distance(3, 7))


def test_load_from_file(tmp_path, line_instance):
    path = tmp_path / "line_4.txt"
    path.write_text(line_instance.to_text())
    loaded = WasteInstance(filename=str(path))
    assert loaded.filename == "line_4.txt"
    assert loaded.dataset == "dataset"
    assert loaded.customer_count == 4


def test_parse_without_matrix_uses_coordinates():
    text = "\n".join([
        "dataset: tiny_2",
        "Nodes",
        "0 0 0 0 100 0",
        "3 4 5 0 100 0",
        "6 8 9999 0 100 0",
        "Vehicles",
        "1 0 0 20 10",
    ])
    instance = WasteInstance(data=text)
    assert instance.distance(0, 1) == pytest.approx(5.0)
    assert instance.distance(0, 2) == pytest.approx(10.0)
    assert instance.nodes[2].dumping_site


@pytest.mark.parametrize("text", [
    "no header here",
    "dataset: bad_1\nNodes\n0 0 0 0 100\nVehicles\n1 0 0 20 10",
    "dataset: bad_1\nNodes\n0 0 0 0 100 0\nVehicles\n1 0 0 20",
    "dataset: bad_1\nNodes\n0 0 0 0 100 0\nVehicles\n1 0 0 20 10\nmatrix\n0 1",
    "dataset: bad_1\n0 0 0 0 100 0",
])
def test_malformed_text_raises_value_error(text):
    with pytest.raises(ValueError):
        WasteInstance(data=text)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        WasteInstance(filename=str(tmp_path / "nowhere.txt"))


def test_no_source_raises():
    with pytest.raises(ValueError):
        WasteInstance()


def test_copy_shares_nodes_but_not_routes(line_solution):
    clone = line_solution.copy()
    clone.vehicles[0].route.pop(1)
    clone.removed.append(1)
    assert line_solution.vehicles[0].route[1] == 1
    assert line_solution.removed == []
    assert clone.instance is line_solution.instance


def test_solution_hash_is_vehicle_order_sensitive():
    instance = build_line_instance(vehicle_count=2)
    first = WasteSolution(instance)
    first.vehicles[0].route = [0, 1, 5, 0]
    first.vehicles[1].route = [0, 2, 5, 0]
    second = first.copy()
    second.vehicles[0].route, second.vehicles[1].route = second.vehicles[1].route, second.vehicles[0].route

    assert first.solution_hash() == first.copy().solution_hash()
    assert first.solution_hash() != second.solution_hash()


def test_objective_counts_penalty_stops(line_solution):
    solution = line_solution.copy()
    route = solution.vehicles[0].route
    route.remove(3)
    solution.penalty_vehicle.route.append(3)
    solution.update_arrival_times()

    # 0-10-20-50-40-50-0 plus one penalty stop at 2 * 50
    assert solution.calculate_objective() == pytest.approx(120.0 + 100.0)
    assert solution.calculate_objective() > line_solution.objective()


def test_empty_vehicle_costs_nothing():
    instance = build_line_instance(vehicle_count=2)
    solution = WasteSolution(instance)
    solution.vehicles[0].route = [0, 1, 2, 5, 0]
    solution.vehicles[1].route = [0, 5, 0]
    solution.penalty_vehicle.route = [3, 4]
    solution.update_arrival_times()
    assert solution.vehicles[1].is_empty(instance)
    assert solution.vehicles_in_use() == 2
    assert solution.calculate_objective() == pytest.approx(100.0 + 2 * 2 * 50.0)


def test_nearest_dumping_site_respects_exclusion():
    instance = build_line_instance(extra_nodes=[(60, 3000, 0, 1000)])
    vehicle = Vehicle(0, maximum_capacity=25, maximum_stops=20)
    assert instance.nearest_dumping_site(vehicle, instance.nodes[4]).id == 5
    assert instance.nearest_dumping_site(vehicle, instance.nodes[4], excluded=[5]).id == 6
    assert instance.nearest_dumping_site(vehicle, instance.nodes[4], excluded=[5, 6]) is None


def test_nearest_dumping_site_prefers_reachable_site():
    # The closer site closes before the truck can get there
    instance = build_line_instance(extra_nodes=[(45, 3000, 0, 5)])
    vehicle = Vehicle(0, maximum_capacity=25, maximum_stops=20)
    vehicle.current_time = 40.0
    assert instance.nearest_dumping_site(vehicle, instance.nodes[4]).id == 5


def test_find_next_node_respects_capacity_and_visits(line_instance):
    vehicle = Vehicle(0, maximum_capacity=25, maximum_stops=20)
    vehicle.route = [0, 1, 2]
    vehicle.current_time = 20.0
    vehicle.capacity = 20.0
    line_instance.reset_visits()
    line_instance.nodes[1].visited = True
    line_instance.nodes[2].visited = True
    assert line_instance.find_next_node(vehicle, line_instance.nodes[2]) is None

    vehicle.capacity = 0.0
    assert line_instance.find_next_node(vehicle, line_instance.nodes[2]).id == 3


def test_find_next_node_respects_stop_limit(line_instance):
    vehicle = Vehicle(0, maximum_capacity=25, maximum_stops=3)
    vehicle.route = [0]
    line_instance.reset_visits()
    assert line_instance.find_next_node(vehicle, line_instance.depot) is None
