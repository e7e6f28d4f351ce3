"""service-b: a slow dice roll behind GET /RollDice."""
