"""Single-link packet scheduling simulator.

This package simulates one capacity-limited transmission link shared by
several random traffic sources, under FCFS or WFQ scheduling.
"""
