"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/benchmarks/__init__.py
--------------------------------------------------------------------------------
"""
