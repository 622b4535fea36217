"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/analysis/__init__.py
--------------------------------------------------------------------------------
"""
