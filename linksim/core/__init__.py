"""Core components for link simulation.

This module contains the fundamental classes for link simulation,
including Packet, EventScheduler, the admission queues, LinkServer and
LinkSimulator.
"""
