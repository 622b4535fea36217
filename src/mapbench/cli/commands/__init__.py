"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/cli/commands/__init__.py
--------------------------------------------------------------------------------
"""
