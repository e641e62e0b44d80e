"""Fake MIP solver that prints a Gurobi-style log and a JSON result block.

Usage: python -u examples/solvers/demo_solver.py [ITERATIONS] [--fail]
"""

from __future__ import annotations

import json
import sys
import time


def _banner() -> None:
    print("Set parameter Username")
    print("Academic license - for non-commercial use only")
    print("Gurobi Optimizer version 11.0.0 build v11.0.0rc2 (linux64)")
    print("CPU model: Demo CPU @ 2.40GHz")
    print("Thread count: 8 physical cores, 16 logical processors")
    print("Optimize a model with 120 rows, 340 columns and 1800 nonzeros")
    print("Model fingerprint: 0x5a1e2b3c")


def main(argv: list[str]) -> int:
    iterations = 60
    fail = False
    for arg in argv:
        if arg == "--fail":
            fail = True
        elif arg.isdigit():
            iterations = int(arg)

    _banner()
    print()
    print("    Nodes    |    Current Node    |     Objective Bounds      |     Work")
    print(" Expl Unexpl |  Obj  Depth IntInf | Incumbent    BestBd   Gap | It/Node Time")
    print()
    incumbent = 1000.0
    for node in range(iterations):
        incumbent -= 3.5
        if node % 17 == 0:
            print(f"H{node:5d}    0                    {incumbent:10.4f}  900.0000  4.2%     -    0s")
        else:
            print(f"{node:6d}    {iterations - node:4d}   {incumbent:10.4f}   12    3   {incumbent:10.4f}  900.0000  4.2%   3.1    0s")
        sys.stdout.flush()
        time.sleep(0.001)

    print()
    print("Explored nodes, simplex iterations in 0.42 seconds")
    print("===JSON_BEGIN===")
    print(
        json.dumps(
            {
                "status": "OPTIMAL",
                "objective": round(incumbent, 4),
                "assignments": [{"job": index, "machine": index % 3} for index in range(25)],
                "gap_history": [round(4.2 - index * 0.1, 2) for index in range(30)],
            }
        )
    )
    print("===JSON_END===")

    if fail:
        print("solver license expired", file=sys.stderr)
        return 3
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
