"""Word-addressable memory with device register hooks."""
