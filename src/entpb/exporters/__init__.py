"""Exporters turning file descriptors into .proto text and protobuf descriptor sets."""

from .descriptor_set import to_descriptor_set, to_file_descriptor_proto
from .proto import render_proto

__all__ = ["render_proto", "to_descriptor_set", "to_file_descriptor_proto"]
