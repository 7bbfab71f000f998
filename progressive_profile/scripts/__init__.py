"""
Developer scripts for the Progressive Profile Engine.
"""
