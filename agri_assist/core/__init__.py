"""
Core functionality for Agri Assist.

This package contains the main logic for:
- Speech capture and transcript merging
- Prompt orchestration and response parsing for each request kind
- Streaming expert chat
- Language settings, the local store and the community board
- Configuration management
"""
