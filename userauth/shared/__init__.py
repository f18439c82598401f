"""Cross-cutting helpers shared by all layers (logging, datetime, id generation)."""
