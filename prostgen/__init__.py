"""Building blocks for generating prost-style Rust code from Protocol Buffers descriptors."""

__version__ = "0.11.8"