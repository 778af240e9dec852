"""
Invoker Package
===============

Simulation core for the Invoker falling-piece rhythm minigame, plus the
wrappers built on top of it:

- Piece spawning and motion
- Hit detection and circle collection
- Difficulty feedback loop
- Session wrapper, numpy snapshots and a Gymnasium environment

All tunable parameters are in invoker_config.yaml.
"""
