"""Tape Loop Factory - offline tape stamping."""
