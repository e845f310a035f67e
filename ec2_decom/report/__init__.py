"""Inventory and run report rendering."""
