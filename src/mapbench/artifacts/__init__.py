"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/artifacts/__init__.py
--------------------------------------------------------------------------------
"""
