"""Debate coordinator: chat rooms, turn orchestration and judging for agent debates."""

__version__ = "0.1.0"
