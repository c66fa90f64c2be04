"""Single-player terminal Battleship."""
