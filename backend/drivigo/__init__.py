"""Drivigo driving-lesson marketplace backend."""
