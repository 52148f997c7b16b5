"""
Test suite for RoomChat.

Run with: python -m pytest RoomChat/test -v
"""
