"""Register file, word arithmetic and instruction decoding."""
