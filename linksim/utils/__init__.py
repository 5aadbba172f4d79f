"""Reporting, comparison and plotting helpers for link simulation results."""
