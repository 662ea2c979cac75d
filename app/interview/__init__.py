"""
AI interview engine: session state, question strategy, answer evaluation,
scoring and the orchestrator that ties them together.
"""
