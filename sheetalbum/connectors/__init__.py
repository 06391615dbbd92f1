"""External service connectors (Google Sheets, Telegram)."""
