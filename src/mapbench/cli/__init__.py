"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/cli/__init__.py
--------------------------------------------------------------------------------
"""
