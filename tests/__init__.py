"""
Test suite for Agri Assist.

This package contains tests for all core functionality including:
- Type definitions and the local store
- Speech capture sessions and the Whisper engine
- Prompt orchestration, market table parsing and streaming chat
- View state handling and the CLI
- Configuration management
"""
