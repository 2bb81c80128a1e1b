"""Performance benchmarks for descentkit.

This package contains benchmarks for the solver loops, timing full solves
and reporting evaluation counts.
"""
