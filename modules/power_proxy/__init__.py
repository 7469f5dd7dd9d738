"""Caching proxy in front of the agent and the battery simulator."""
