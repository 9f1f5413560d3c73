"""
Command line interface (Typer).
"""
