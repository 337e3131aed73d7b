"""eatlink: Telegram media download bot with batched summary replies."""
