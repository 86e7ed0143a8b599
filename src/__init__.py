"""Conveyor sorting line simulator."""
