#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Tuning constants of the search. Override single values with dataclasses.replace, e.g.
replace(AlnsParameters(), max_iterations=5000)


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

from dataclasses import dataclass

DUMPING_SITE_THRESHOLD = 1000
DIVIDER_STRING = "=" * 60

DESTROY_OPERATOR_NAMES = ('worst_removal', 'random_removal', 'related_removal',
                          'delete_disposal', 'swap_disposal', 'insert_disposal')
REPAIR_OPERATOR_NAMES = ('greedy_insert', 'regret_2_insert', 'regret_3_insert', 'regret_k_insert')


@dataclass
class AlnsParameters:
    # relatedness weights: distance, visit time, demand
    phi: float = 9
    chi: float = 3
    psi: float = 2
    # randomization exponents of related and worst removal
    related_p: float = 6
    p_worst: float = 3

    # start temperature control: a W worse solution is accepted with probability 0.5
    w: float = 0.05
    cooling_rate: float = 0.995
    end_temperature: float = 1e-10

    # operator scores and weight smoothing
    sigma_1: float = 33
    sigma_2: float = 9
    sigma_3: float = 13
    reaction_factor: float = 0.1
    segment_length: int = 100

    max_iterations: int = 25000
    max_stagnation: int = 2000

    # removal count p
    min_removal: int = 4
    removal_fraction: float = 0.4
    max_removal: int = 100

    penalty_factor: float = 2.0
