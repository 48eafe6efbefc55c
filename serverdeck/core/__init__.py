"""Qt-free core: event bus, persistence, host registry, sidebar and view state."""
