"""Synthesis of protobuf descriptors from resolved entities."""
