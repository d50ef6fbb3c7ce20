#-*- coding: utf-8 -*-
"""
Created on Mon October 19 09:12:44 2026

ALNS (Adaptive Large Neighborhood Search) implementation for the waste collection
vehicle routing problem with time windows and intermediate dumping sites (WCVRPTW)
Using the ALNS library https://github.com/N-Wouda/ALNS/tree/master

Line buffer of the run log. Lines are kept in memory during the search and written
out in one go, so a run that ends early still leaves everything logged so far.


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

import os
from typing import List

from wastealns.classes.Constants import DIVIDER_STRING


class TextLogger:
    """Collects line oriented records of one solver run"""

    def __init__(self, echo: bool = False):
        """
        Args:
            echo: also print every line to the console
        """
        self.lines: List[str] = []
        self.echo = echo

    def log(self, line: str):
        self.lines.append(str(line))
        if self.echo:
            print(line)

    def empty_line(self):
        self.log("")

    def divider(self):
        self.log(DIVIDER_STRING)

    def text(self) -> str:
        return '\n'.join(self.lines) + '\n'

    def write_file(self, path: str):
        """Write the buffered lines to path, creating parent folders as needed"""
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(path, 'w') as f:
            f.write(self.text())
        print(f"Run log written to {path} ({len(self.lines)} lines)")
