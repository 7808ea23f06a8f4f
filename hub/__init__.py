"""The hub: spawns player programs and referees the game."""
