#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Greedy construction followed by ALNS with six destroy operators, four repair operators,
adaptive operator weights and simulated annealing acceptance. Usage:

    python -m wastealns.wcvrp data/kim --runs 10 --seed 42 --log-dir logs


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

import argparse
import functools
import glob
import math
import os
import time
from dataclasses import replace
from datetime import datetime, timedelta

import matplotlib.pyplot as plt
import numpy as np
from alns import ALNS
from alns.accept import SimulatedAnnealing

from wastealns.classes.ALNSProgressLogger import ALNSProgressLogger
from wastealns.classes.AlnsProblem import WasteInstance, WasteSolution
from wastealns.classes.Constants import AlnsParameters, DESTROY_OPERATOR_NAMES, REPAIR_OPERATOR_NAMES
from wastealns.classes.EarlyStopping import StagnationStoppingCriterion
from wastealns.classes.HeuristicWeights import HeuristicWeights
from wastealns.classes.TextLogger import TextLogger
from wastealns.destroy_oper.DisposalDestroyOperators import delete_disposal, insert_disposal, swap_disposal
from wastealns.destroy_oper.GeneralDestroyOperators import random_removal, related_removal, worst_removal
from wastealns.functions.InitialSolutions import create_greedy_solution
from wastealns.functions.Reporting import log_alns_report, log_greedy_report
from wastealns.repair_oper.GeneralRepairOperators import (greedy_insert, regret_2_insert, regret_3_insert,
                                                          regret_k_insert)

DESTROY_OPERATORS = [worst_removal, random_removal, related_removal, delete_disposal, swap_disposal, insert_disposal]
REPAIR_OPERATORS = [greedy_insert, regret_2_insert, regret_3_insert, regret_k_insert]


def initial_temperature(value: float, params: AlnsParameters) -> float:
    """Temperature at which a W worse solution is accepted with probability 0.5"""
    return max(-(params.w * value) / math.log(0.5), params.end_temperature)


def guard_operator(operator, stop: StagnationStoppingCriterion, logger: TextLogger):
    """
    Wrap an operator so an IndexError ends the run instead of the process.

    The failing iteration yields an aborted candidate with infinite objective, which the
    acceptance criterion always rejects, and the stopping criterion ends the loop.
    """

    @functools.wraps(operator)
    def guarded(state: WasteSolution, random_state, **kwargs):
        if state.aborted:
            return state
        try:
            return operator(state, random_state, **kwargs)
        except IndexError as e:
            logger.log(f"IndexError in {operator.__name__}: {e}")
            print(f"IndexError in {operator.__name__}, stopping this run: {e}")
            stop.abort(f"{operator.__name__}: {e}")
            failed = state.copy()
            failed.mark_aborted()
            return failed

    return guarded


def solve_with_alns(instance: WasteInstance, params: AlnsParameters = None, seed: int = None,
                    logger: TextLogger = None, report_interval: int = 500, is_plot: bool = False,
                    is_verbose: bool = True):
    """
    Solve a waste collection instance with greedy construction and ALNS

    Returns:
        (best_state, progress_logger, heuristic_weights)
    """
    params = params or AlnsParameters()
    logger = logger if logger is not None else TextLogger()
    random_state = np.random.default_rng(seed)

    logger.divider()
    logger.empty_line()
    logger.log(f"Solving {instance.info} with greedy at {datetime.now()}")
    start_time = time.time()
    initial_solution = create_greedy_solution(instance, params)
    logger.log(f"Greedy initialization took {time.time() - start_time:.3f} seconds")
    logger.empty_line()
    log_greedy_report(logger, initial_solution)
    logger.empty_line()
    logger.divider()

    if is_verbose:
        print(f"Initial solution: {initial_solution.vehicles_in_use()} vehicles, "
              f"objective = {initial_solution.objective():.2f}")

    alns = ALNS(random_state)
    stop_criterion = StagnationStoppingCriterion(params.max_iterations, params.max_stagnation, is_verbose)

    for name, operator in zip(DESTROY_OPERATOR_NAMES, DESTROY_OPERATORS):
        alns.add_destroy_operator(guard_operator(operator, stop_criterion, logger), name=name)
    for name, operator in zip(REPAIR_OPERATOR_NAMES, REPAIR_OPERATORS):
        alns.add_repair_operator(guard_operator(operator, stop_criterion, logger), name=name)

    select = HeuristicWeights(params, logger=logger)
    select.register_solution(initial_solution)

    progress_logger = ALNSProgressLogger(log_mode='interval', interval=report_interval, is_verbose=is_verbose)
    progress_logger.start(initial_solution)
    progress_logger.attach(alns)

    start_temperature = initial_temperature(initial_solution.objective(), params)
    criterion = SimulatedAnnealing(
        start_temperature=start_temperature,
        end_temperature=params.end_temperature,
        step=params.cooling_rate,
        method="exponential"
    )

    logger.empty_line()
    logger.log(f"Solving {instance.info} with ALNS at {datetime.now()}, start temperature {start_temperature}")
    if is_verbose:
        print(f"\nStarting ALNS optimization for at most {params.max_iterations} iterations...")
        print("=" * 60)

    result = None
    best_state = initial_solution
    start_time = time.time()
    try:
        result = alns.iterate(initial_solution, select, criterion, stop_criterion)
        best_state = result.best_state
    except IndexError as e:
        # Report what was found so far
        logger.log(f"IndexError during ALNS, stopping early: {e}")
        print(f"IndexError during ALNS, stopping early: {e}")
        best_state = progress_logger.best_state
    logger.log(f"ALNS took {time.time() - start_time:.3f} seconds")
    if stop_criterion.stop_reason:
        logger.log(f"Stopped: {stop_criterion.stop_reason}")
    logger.empty_line()

    progress_logger.final_report()
    log_alns_report(logger, best_state, stop_criterion.current_iteration,
                    progress_logger.accepted_values, select.snapshots)
    logger.empty_line()
    logger.divider()

    if is_plot and result is not None:
        _, ax = plt.subplots(figsize=(12, 6))
        result.plot_objectives(ax=ax)
        plt.show()

    return best_state, progress_logger, select


def collect_instance_paths(paths):
    """Expand folders to the instance files they contain"""
    collected = []
    for path in paths:
        if os.path.isdir(path):
            collected.extend(sorted(glob.glob(os.path.join(path, '*.txt'))))
        else:
            collected.append(path)
    return collected


def main(argv=None):
    """Solve every given instance --runs times and write one run log per run"""
    parser = argparse.ArgumentParser(description="Solve waste collection VRPTW instances with ALNS")
    parser.add_argument('instances', nargs='+',
                        help='Instance files or folders of *.txt instance files')
    parser.add_argument('--runs', type=int, default=1,
                        help='Runs per instance (default: 1)')
    parser.add_argument('--iterations', type=int, default=AlnsParameters.max_iterations,
                        help='Maximum ALNS iterations (default: %(default)s)')
    parser.add_argument('--stagnation', type=int, default=AlnsParameters.max_stagnation,
                        help='Iterations without a new best before stopping (default: %(default)s)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Base random seed, run n uses seed + n')
    parser.add_argument('--log-dir', type=str, default='logs',
                        help='Folder for the run logs (default: logs)')
    parser.add_argument('--report-interval', type=int, default=500,
                        help='Accepted solutions between console progress lines')
    parser.add_argument('--plot', action='store_true',
                        help='Plot the objective trace of every run')
    args = parser.parse_args(argv)

    params = replace(AlnsParameters(), max_iterations=args.iterations, max_stagnation=args.stagnation)
    paths = collect_instance_paths(args.instances)
    if not paths:
        parser.error("no instance files found")

    for path in paths:
        print(f"Loading instance {path}...")
        instance = WasteInstance(filename=path)
        print(f"Instance loaded:")
        print(f"- Info: {instance.info}")
        print(f"- Vehicles: {len(instance.vehicles)}")
        print(f"- Customers: {instance.n_customers}")
        print(f"- Dumping sites: {len(instance.dumping_sites)}")
        print(f"- Total nodes: {len(instance.nodes)}")

        stem = os.path.splitext(os.path.basename(path))[0]
        for run in range(args.runs):
            seed = None if args.seed is None else args.seed + run
            logger = TextLogger()
            try:
                solution, _, _ = solve_with_alns(instance, params, seed=seed, logger=logger,
                                                 report_interval=args.report_interval, is_plot=args.plot)
            finally:
                logger.write_file(os.path.join(args.log_dir, f"{stem}_run{run + 1}.txt"))

            print(f"\nFinal solution of run {run + 1}:")
            print(f"- Vehicles used: {solution.vehicles_in_use()}")
            print(f"- Total distance: {solution.objective():.2f}")
            print(f"- Feasible: {solution.is_feasible()}")
            print(f"- Penalty stops: {len(solution.penalty_vehicle.route)}")
    return 0


if __name__ == "__main__":
    # Start timer
    start_time = time.time()
    #
    main()
    #
    end_timer = time.time()
    end_time = end_timer - start_time

    print("================================================================")
    print('Finished performing everything, time elapsed {}'.format(str(timedelta(seconds=end_time))))

    print("================================================================")
