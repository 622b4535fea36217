"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/core/__init__.py
--------------------------------------------------------------------------------
"""
