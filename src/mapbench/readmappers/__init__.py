"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/readmappers/__init__.py
--------------------------------------------------------------------------------
"""
