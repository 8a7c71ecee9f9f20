"""Semantic analysis for the Koord distributed-robotics language."""
