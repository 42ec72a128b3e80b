"""Request and response shapes for the JSON API (camelCase on the wire)."""
