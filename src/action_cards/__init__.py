"""action_cards -- resolution engine for tabletop-RPG action cards."""
