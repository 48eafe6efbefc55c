"""ServerDeck: desktop shell hosting several remote chat servers side by side."""
