"""Camera framing between named view contexts."""
