"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/__init__.py

Benchmark harness for long-read aligners (floxer vs minimap2).
--------------------------------------------------------------------------------
"""

__version__ = "0.3.0"
