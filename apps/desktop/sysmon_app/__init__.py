"""SysMon desktop window and command-line tools."""
