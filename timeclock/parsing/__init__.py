"""Cell-level parsing: dates, times and header column roles."""
