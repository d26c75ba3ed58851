"""Tape Loop Verify - cartridge diagnostics."""
