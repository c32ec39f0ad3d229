"""flowcanvas web host."""
