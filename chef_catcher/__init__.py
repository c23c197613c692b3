"""
Chef Catcher
============

Gameplay simulation for a single-screen arcade catcher: the chef runs
along the bottom of the playfield catching falling ingredients, dodging
hazards and grabbing shield/magnet power-ups while the difficulty climbs.

The simulation is a library driven by a host loop that supplies frame
times and input each tick and reads state back for rendering. All
tunable parameters live in game_config.yaml.
"""
