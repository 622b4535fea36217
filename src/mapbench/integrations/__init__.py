"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/integrations/__init__.py
--------------------------------------------------------------------------------
"""
