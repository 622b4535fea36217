"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/config/__init__.py
--------------------------------------------------------------------------------
"""
