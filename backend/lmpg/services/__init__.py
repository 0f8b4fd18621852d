"""Services — DB orchestration for each API area. Routes stay thin."""
