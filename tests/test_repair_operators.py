import numpy as np
import pytest

from conftest import assert_conserved, assert_well_formed, build_line_instance
from wastealns.classes.AlnsProblem import Node, Vehicle, WasteInstance, WasteSolution
from wastealns.classes.NodeSwap import NodeSwap
from wastealns.destroy_oper.DisposalDestroyOperators import delete_disposal, insert_disposal, swap_disposal
from wastealns.destroy_oper.GeneralDestroyOperators import (random_removal, related_removal, remove_at,
                                                            worst_removal)
from wastealns.functions.InitialSolutions import create_greedy_solution
from wastealns.repair_oper import GeneralRepairOperators
from wastealns.repair_oper.GeneralRepairOperators import (apply_swap, best_position, candidate_vehicles, greedy_insert,
                                                          regret_2_insert, regret_3_insert, regret_k_insert,
                                                          regret_record)

REPAIR_OPERATORS = [greedy_insert, regret_2_insert, regret_3_insert, regret_k_insert]
DESTROY_OPERATORS = [worst_removal, random_removal, related_removal, delete_disposal, swap_disposal,
                     insert_disposal]


def assert_feasible(solution):
    assert solution.removed == []
    assert solution.is_feasible()
    assert_conserved(solution)
    assert_well_formed(solution)


def without_customer(solution, node_id):
    destroyed = solution.copy()
    for vehicle_idx, vehicle in enumerate(destroyed.vehicles):
        if node_id in vehicle.route:
            remove_at(destroyed, vehicle_idx, vehicle.route.index(node_id))
    destroyed.update_arrival_times()
    return destroyed


@pytest.mark.parametrize("operator", REPAIR_OPERATORS)
def test_repair_empties_buffer(small_solution, operator):
    destroyed = random_removal(small_solution, np.random.default_rng(5))
    assert destroyed.removed

    repaired = operator(destroyed, np.random.default_rng(5))
    assert_feasible(repaired)
    assert repaired.objective() == pytest.approx(repaired.calculate_objective())
    # Buffer of the input untouched
    assert len(destroyed.removed) == 4


@pytest.mark.parametrize("operator", REPAIR_OPERATORS)
def test_repair_puts_customer_back_at_cheapest_position(line_solution, operator):
    destroyed = without_customer(line_solution, 3)
    repaired = operator(destroyed, np.random.default_rng(0))

    assert_feasible(repaired)
    assert repaired.penalty_vehicle.route == []
    assert repaired.objective() == pytest.approx(140.0)


@pytest.mark.parametrize("operator", REPAIR_OPERATORS)
def test_unreachable_customer_goes_to_penalty_vehicle(penalty_instance, operator):
    solution = create_greedy_solution(penalty_instance)
    destroyed = without_customer(solution, 6)
    assert destroyed.penalty_vehicle.route == []

    repaired = operator(destroyed, np.random.default_rng(0))
    assert repaired.penalty_vehicle.route == [6]
    assert repaired.removed == []
    assert_conserved(repaired)


def test_repair_after_every_customer_was_removed():
    solution = create_greedy_solution(build_line_instance(vehicle_count=2))
    destroyed = random_removal(solution, np.random.default_rng(0))
    assert sorted(destroyed.removed) == [1, 2, 3, 4]
    repaired = greedy_insert(destroyed, np.random.default_rng(0))
    assert_feasible(repaired)
    assert repaired.penalty_vehicle.route == []


def test_candidate_vehicles_keeps_one_empty_representative():
    solution = create_greedy_solution(build_line_instance(vehicle_count=3))
    assert solution.vehicles[1].route == solution.vehicles[2].route == [0, 5, 0]
    assert candidate_vehicles(solution) == [0, 1]


def test_best_position_respects_capacity(line_solution):
    destroyed = without_customer(line_solution, 3)
    index, cost = best_position(destroyed, destroyed.vehicles[0], 3)
    # Either side of customer 4 in the second load, never in the full first load
    assert index in (4, 5)
    assert cost == pytest.approx(20.0)


def test_best_position_none_when_nothing_fits(penalty_instance):
    solution = create_greedy_solution(penalty_instance)
    assert best_position(solution, solution.vehicles[0], 6) is None


def test_regret_sum():
    record = NodeSwap(1)
    for vehicle, value in [(2, 30.0), (0, 10.0), (1, 15.0)]:
        record.regret_list.append(NodeSwap(1, vehicle, 1, value, True))
    record.sort_regret_list()

    assert record.best.vehicle == 0
    assert record.regret_sum(1) == 0.0
    assert record.regret_sum(2) == pytest.approx(5.0)
    assert record.regret_sum(3) == pytest.approx(25.0)
    assert record.regret_sum(10) == pytest.approx(25.0)

    record.drop_vehicle(0)
    assert record.feasible_vehicle_count == 2
    assert record.best.value == pytest.approx(15.0)


@pytest.mark.parametrize("destroy", DESTROY_OPERATORS)
@pytest.mark.parametrize("repair", REPAIR_OPERATORS)
def test_every_operator_pair_keeps_solution_feasible(small_solution, destroy, repair):
    rng = np.random.default_rng(42)
    current = small_solution
    for _ in range(3):
        current = repair(destroy(current, rng), rng)
        assert_feasible(current)


@pytest.fixture
def insertion_order(monkeypatch):
    """Node ids in the order the repair operator inserts them"""
    order = []

    def recording_apply_swap(solution, swap):
        order.append(swap.node)
        apply_swap(solution, swap)

    monkeypatch.setattr(GeneralRepairOperators, "apply_swap", recording_apply_swap)
    return order


def build_priority_solution():
    """
    Customer 6 (x=55) only fits truck 0, customer 7 (x=35, demand 5) fits both trucks.
    Truck 1 is loaded to 20 of 25, customer 2 waits in the penalty vehicle.
    """
    instance = build_line_instance(vehicle_count=2, extra_nodes=[(55, 10, 0, 1000), (35, 5, 0, 1000)])
    solution = WasteSolution(instance)
    solution.vehicles[0].route = [0, 1, 5, 0]
    solution.vehicles[1].route = [0, 3, 4, 5, 0]
    solution.penalty_vehicle.route = [2]
    solution.removed = [7, 6]
    solution.update_arrival_times()
    return solution


def build_tie_solution():
    """
    Customers 3 and 4 both have regret 8 over the two trucks: 3 costs 0 or 8, 4 costs 5 or 13.
    Truck 0 has room for one of them only.
    """
    nodes = [Node(0, 0, 0, 0, 0, 1000, 0)]
    nodes += [Node(i, 0, 0, 10, 0, 1000, 0) for i in range(1, 5)]
    nodes.append(Node(5, 0, 0, 2000, 0, 1000, 0))
    distances = [[0.0 if i == j else 10.0 for j in range(6)] for i in range(6)]
    for a, b, d in [(1, 3, 2.0), (3, 5, 8.0), (1, 4, 5.0), (2, 4, 13.0), (3, 4, 7.0)]:
        distances[a][b] = distances[b][a] = d
    vehicles = [Vehicle(i, 1, 0, 0, 25, 20) for i in range(2)]
    instance = WasteInstance.from_nodes(nodes, vehicles, distances=distances, info="tie_4")

    solution = WasteSolution(instance)
    solution.vehicles[0].route = [0, 1, 5, 0]
    solution.vehicles[1].route = [0, 2, 5, 0]
    solution.removed = [4, 3]
    solution.update_arrival_times()
    return solution


@pytest.mark.parametrize("operator", [regret_2_insert, regret_3_insert, regret_k_insert])
def test_regret_inserts_node_with_fewer_options_first(insertion_order, operator):
    repaired = operator(build_priority_solution(), np.random.default_rng(0))

    assert insertion_order == [6, 7]
    assert repaired.vehicles[0].route == [0, 1, 6, 5, 0]
    assert repaired.vehicles[1].route == [0, 3, 7, 4, 5, 0]
    assert repaired.penalty_vehicle.route == [2]
    # 110 + 100 driven plus one penalty stop at 2 * 55
    assert repaired.objective() == pytest.approx(320.0)


def test_regret_k_prefers_fewer_options_over_larger_regret(insertion_order):
    solution = build_priority_solution()
    vehicle_indices = candidate_vehicles(solution)
    # Over every option customer 7 has the larger regret, yet 6 has fewer vehicles
    assert regret_record(solution, 7, vehicle_indices).regret_sum(3) == pytest.approx(110.0)
    assert regret_record(solution, 6, vehicle_indices).regret_sum(3) == pytest.approx(100.0)

    regret_k_insert(solution, np.random.default_rng(0))
    assert insertion_order == [6, 7]


def test_regret_tie_goes_to_smaller_best_cost(insertion_order):
    solution = build_tie_solution()
    vehicle_indices = candidate_vehicles(solution)
    assert regret_record(solution, 3, vehicle_indices).regret_sum(2) == pytest.approx(8.0)
    assert regret_record(solution, 4, vehicle_indices).regret_sum(2) == pytest.approx(8.0)

    repaired = regret_2_insert(solution, np.random.default_rng(0))
    assert insertion_order == [3, 4]
    assert repaired.vehicles[0].route == [0, 1, 3, 5, 0]
    assert repaired.vehicles[1].route == [0, 4, 2, 5, 0]


def test_greedy_inserts_cheapest_pair_first(insertion_order):
    repaired = greedy_insert(build_priority_solution(), np.random.default_rng(0))

    # Customer 7 costs nothing between 1 and the site, 6 needs a detour of 10
    assert insertion_order == [7, 6]
    assert repaired.vehicles[0].route == [0, 1, 7, 6, 5, 0]
    assert repaired.vehicles[1].route == [0, 3, 4, 5, 0]


def test_greedy_ignores_buffer_order(insertion_order):
    repaired = greedy_insert(build_tie_solution(), np.random.default_rng(0))
    assert insertion_order == [3, 4]
    assert repaired.vehicles[0].route == [0, 1, 3, 5, 0]
    assert repaired.vehicles[1].route == [0, 4, 2, 5, 0]


def test_best_position_scans_past_late_slot_on_non_metric_matrix():
    # Straight from the depot customer 2 is too late, via customer 1 it is on time
    nodes = [Node(0, 0, 0, 0, 0, 1000, 0), Node(1, 0, 0, 10, 0, 1000, 0),
             Node(2, 0, 0, 10, 0, 10, 0), Node(3, 0, 0, 2000, 0, 1000, 0)]
    distances = [[0.0 if i == j else 10.0 for j in range(4)] for i in range(4)]
    distances[0][2] = distances[2][0] = 100.0
    distances[0][1] = distances[1][0] = 1.0
    distances[1][2] = distances[2][1] = 1.0
    instance = WasteInstance.from_nodes(nodes, [Vehicle(0, 1, 0, 0, 25, 20)], distances=distances)
    assert not instance.metric

    solution = WasteSolution(instance)
    solution.vehicles[0].route = [0, 1, 3, 0]
    solution.update_arrival_times()
    assert best_position(solution, solution.vehicles[0], 2) == (2, pytest.approx(1.0))


def test_euclidean_instances_are_metric(small_instance, line_instance):
    assert small_instance.metric
    assert line_instance.metric
    assert build_tie_solution().instance.metric
