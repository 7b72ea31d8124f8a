# rigidreg/analysis/__init__.py
"""Command line runners."""
