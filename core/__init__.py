"""Lumasort core: pixel grid, sort orchestration, image I/O and safety guards."""
