"""
performance - Parallel execution for the mission-table build

The porkchop build is the only long-running computation in the core:
N_a * N_d independent Lambert solves. This package spreads it over cores.

    parallel  - RowPool: row-partitioned multiprocessing with in-order
                results and between-row cancellation.
"""
