"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/utils/__init__.py
--------------------------------------------------------------------------------
"""
