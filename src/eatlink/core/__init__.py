"""Core domain package for eatlink.

Core contains batching, debouncing, and media-group bookkeeping without any
Telegram or filesystem-specific code, keeping the coordination logic portable.
"""
